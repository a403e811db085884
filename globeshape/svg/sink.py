"""Shape sinks — receivers of the closed shapes an export discovers.

The pipeline calls ``begin_shape``, then ``add_edge`` once per segment in
boundary order, then ``end_shape``, for each closed polygon.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from shapely.geometry import Polygon
from shapely.validation import make_valid
from svgpathtools import Path, QuadraticBezier

from globeshape.svg.serializer import serialize_svg

if TYPE_CHECKING:
    from globeshape.svg.primitives import BezierSegment

logger = logging.getLogger(__name__)

# Samples per Bezier edge when converting shapes to polygons.
_SAMPLES_PER_EDGE = 8


class ShapeSink(Protocol):
    def begin_shape(self) -> None: ...

    def add_edge(self, segment: BezierSegment) -> None: ...

    def end_shape(self) -> None: ...


class SegmentListSink:
    """Keeps the raw segments of each shape. Handy for tests and inspection."""

    def __init__(self) -> None:
        self.shapes: list[list[BezierSegment]] = []
        self._current: list[BezierSegment] | None = None

    def begin_shape(self) -> None:
        self._current = []

    def add_edge(self, segment: BezierSegment) -> None:
        if self._current is None:
            raise RuntimeError("add_edge called outside begin_shape/end_shape")
        self._current.append(segment)

    def end_shape(self) -> None:
        if self._current is None:
            raise RuntimeError("end_shape called without begin_shape")
        self.shapes.append(self._current)
        self._current = None


class SvgShapeSink:
    """Collects shapes as svgpathtools Paths on an SVG canvas.

    UV is v-up in [0, 1]²; SVG is y-down, so v is flipped and both axes are
    scaled by ``canvas_size``.
    """

    def __init__(self, canvas_size: float = 1.0) -> None:
        self.canvas_size = canvas_size
        self.paths: list[Path] = []
        self.edge_counts: list[int] = []
        self._current: list[QuadraticBezier] | None = None

    def _to_canvas(self, uv: complex) -> complex:
        return complex(uv.real * self.canvas_size, (1.0 - uv.imag) * self.canvas_size)

    def begin_shape(self) -> None:
        self._current = []

    def add_edge(self, segment: BezierSegment) -> None:
        if self._current is None:
            raise RuntimeError("add_edge called outside begin_shape/end_shape")
        self._current.append(
            QuadraticBezier(
                self._to_canvas(segment.begin_uv),
                self._to_canvas(segment.control_point),
                self._to_canvas(segment.end_uv),
            )
        )

    def end_shape(self) -> None:
        if self._current is None:
            raise RuntimeError("end_shape called without begin_shape")
        self.paths.append(Path(*self._current))
        self.edge_counts.append(len(self._current))
        logger.debug("Shape %d closed with %d edges", len(self.paths), len(self._current))
        self._current = None

    def path_data(self) -> list[str]:
        """SVG ``d`` attribute per shape."""
        return [path.d() for path in self.paths]

    def polygons(self) -> list[Polygon]:
        """Shapely polygon per shape, sampled along each edge."""
        polygons = []
        for path in self.paths:
            pts = [
                (p.real, p.imag)
                for seg in path
                for p in (seg.point(i / _SAMPLES_PER_EDGE) for i in range(_SAMPLES_PER_EDGE))
            ]
            if len(path):
                pts.append((path[-1].end.real, path[-1].end.imag))
            if len(pts) < 3:
                polygons.append(Polygon())
                continue
            poly = Polygon(pts)
            if not poly.is_valid:
                poly = make_valid(poly)
            polygons.append(poly)
        return polygons

    def to_svg(self, fill: str = "#4ECDC4", title: str = "") -> str:
        elements = [
            {"tag": "path", "d": d, "fill": fill, "fill-rule": "evenodd"}
            for d in self.path_data()
        ]
        return serialize_svg(
            elements,
            canvas_w=self.canvas_size,
            canvas_h=self.canvas_size,
            title=title,
        )
