"""Planar quadratic-Bezier segments produced by the export pipeline."""

from __future__ import annotations

from dataclasses import dataclass

from svgpathtools import QuadraticBezier

# Parameter value carried by segments that no arc produced.
SYNTHETIC_PARAM = -1.0


@dataclass(eq=False)
class BezierSegment:
    """One quadratic Bezier in the unit square, plus where it came from on the sphere.

    Arc-backed segments remember the arc index and the arc-length interval
    ``[begin, end]`` they approximate. Stitching segments have ``arc=None`` and
    both parameters at SYNTHETIC_PARAM. Identity semantics: two segments with
    the same geometry are still different map keys.
    """

    curve: QuadraticBezier
    arc: int | None = None
    begin: float = SYNTHETIC_PARAM
    end: float = SYNTHETIC_PARAM

    @classmethod
    def synthetic(cls, begin_uv: complex, end_uv: complex) -> BezierSegment:
        """Straight stitching segment (control point at the chord midpoint)."""
        return cls(QuadraticBezier(begin_uv, (begin_uv + end_uv) / 2, end_uv))

    @property
    def is_synthetic(self) -> bool:
        return self.arc is None

    @property
    def begin_uv(self) -> complex:
        return self.curve.start

    @begin_uv.setter
    def begin_uv(self, value: complex) -> None:
        self.curve.start = value

    @property
    def control_point(self) -> complex:
        return self.curve.control

    @property
    def end_uv(self) -> complex:
        return self.curve.end

    @end_uv.setter
    def end_uv(self, value: complex) -> None:
        self.curve.end = value

    def point(self, s: float) -> complex:
        return complex(self.curve.point(s))

    def __repr__(self) -> str:
        source = "synthetic" if self.is_synthetic else f"arc {self.arc} [{self.begin:.6f}, {self.end:.6f}]"
        return f"BezierSegment({self.begin_uv:.6f} -> {self.end_uv:.6f}, {source})"
