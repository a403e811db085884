"""End-to-end exports of spherical loops through the full pass pipeline."""

from __future__ import annotations

import numpy as np
import pytest

from globeshape.engine.config import PipelineConfig
from globeshape.engine.context import ExportContext
from globeshape.engine.pipeline import create_pipeline, export_loop
from globeshape.engine.registry import Stage
from globeshape.errors import LoopError
from globeshape.sphere.loop import ArcLoop
from globeshape.sphere.projection import EquirectangularProjector, OctahedralProjector
from globeshape.svg.sink import SegmentListSink, SvgShapeSink
from tests.conftest import NORTH_CAP, SOUTH_CAP, UPPER_QUAD


def _polyline_distance(p: complex, polyline: np.ndarray) -> float:
    a = polyline[:-1]
    ab = polyline[1:] - a
    denom = np.abs(ab) ** 2
    with np.errstate(divide="ignore", invalid="ignore"):
        t = ((p - a) * np.conj(ab)).real / denom
    t = np.where(denom > 0, np.clip(t, 0.0, 1.0), 0.0)
    return float(np.min(np.abs(p - (a + t * ab))))


def _subdivided(vertices, projector) -> ExportContext:
    ctx = ExportContext(loop=ArcLoop.from_polygon(vertices), projector=projector, sink=SegmentListSink())
    return create_pipeline().run_stage(ctx, Stage.SUBDIVISION)


def test_quad_without_seams_is_one_shape(upper_quad):
    sink = SegmentListSink()
    ctx = export_loop(ArcLoop.from_polygon(upper_quad), OctahedralProjector(), sink)

    assert ctx.completed_passes == ["P1", "P2", "P3", "P4", "P5", "P6", "P7"]
    assert ctx.shapes_emitted == 1
    assert ctx.exits == []
    assert ctx.connectors == []
    assert ctx.adjacency == {}
    assert ctx.edges_emitted == ctx.segment_count
    assert len(sink.shapes) == 1
    assert len(sink.shapes[0]) == ctx.segment_count


def test_shape_edges_join_end_to_start(upper_quad):
    sink = SegmentListSink()
    export_loop(ArcLoop.from_polygon(upper_quad), OctahedralProjector(), sink)
    shape = sink.shapes[0]
    for current, following in zip(shape, shape[1:] + shape[:1]):
        assert current.end_uv == following.begin_uv


def test_north_cap_inside_octahedral_diamond(north_cap):
    ctx = export_loop(ArcLoop.from_polygon(north_cap), OctahedralProjector(), SegmentListSink())
    assert ctx.shapes_emitted == 1
    assert ctx.connectors == []


def test_antimeridian_crossing_is_stitched_over_the_top(north_cap):
    sink = SegmentListSink()
    ctx = export_loop(ArcLoop.from_polygon(north_cap), EquirectangularProjector(), sink)

    assert len(ctx.exits) == 1
    assert len(ctx.entries) == 1
    assert ctx.exits[0].end_uv.real == 1.0
    assert ctx.entries[0].begin_uv.real == 0.0

    # Exit on the right edge, up through both top corners, down to the entry.
    assert ctx.shapes_emitted == 1
    assert len(ctx.connectors) == 3
    assert [c.end_uv for c in ctx.connectors[:2]] == [1 + 1j, 0 + 1j]
    assert ctx.connectors[2].end_uv == ctx.entries[0].begin_uv
    assert ctx.edges_emitted == ctx.segment_count + 3
    assert ctx.adjacency == {}


def test_south_cap_splits_into_folded_corners(south_cap):
    sink = SegmentListSink()
    ctx = export_loop(ArcLoop.from_polygon(south_cap), OctahedralProjector(), sink)

    assert len(ctx.exits) == 4
    assert ctx.shapes_emitted == 4
    assert len(ctx.connectors) == 8
    corners = {1 + 1j, 1 + 0j, 0 + 0j, 0 + 1j}
    seen = set()
    for shape in sink.shapes:
        synthetic = [s for s in shape if s.is_synthetic]
        assert len(synthetic) == 2
        corner = synthetic[0].end_uv
        assert corner in corners
        assert synthetic[1].begin_uv == corner
        seen.add(corner)
    assert seen == corners


def test_every_segment_emitted_exactly_once(south_cap):
    sink = SegmentListSink()
    ctx = export_loop(ArcLoop.from_polygon(south_cap), OctahedralProjector(), sink)
    emitted = [id(s) for shape in sink.shapes for s in shape]
    assert len(emitted) == len(set(emitted))
    assert set(emitted) == {id(s) for s in ctx.segments} | {id(s) for s in ctx.connectors}


def test_subdivision_reproduces_arc_endpoints(north_cap):
    ctx = _subdivided(north_cap, EquirectangularProjector())
    snap = ctx.config.snap_threshold
    for arc in ctx.loop.edges():
        own = [s for s in ctx.segments if s.arc == arc.index]
        assert own[0].begin == 0.0
        assert own[-1].end == arc.length
        assert own[0].begin_uv == ctx.project(arc.index, 0.0)
        assert own[-1].end_uv == ctx.project(arc.index, arc.length)
        for current, following in zip(own, own[1:]):
            gap = abs(current.end_uv - following.begin_uv)
            # Either an exact shared endpoint, a sub-threshold cut, or the seam jump
            assert gap == 0.0 or gap < snap or gap > 0.5


def test_bezier_chain_stays_within_threshold(north_cap):
    ctx = _subdivided(north_cap, EquirectangularProjector())
    threshold = ctx.config.threshold
    for segment in ctx.segments:
        ts = np.linspace(segment.begin, segment.end, 65)
        curve = np.array([ctx.project(segment.arc, t) for t in ts])
        for s in np.linspace(0.0, 1.0, 17):
            assert _polyline_distance(segment.point(s), curve) < threshold


def test_export_into_svg_sink(north_cap):
    sink = SvgShapeSink(canvas_size=100.0)
    ctx = export_loop(ArcLoop.from_polygon(north_cap), EquirectangularProjector(), sink)
    assert len(sink.paths) == 1
    assert sink.edge_counts == [ctx.edges_emitted]
    (polygon,) = sink.polygons()
    # The cap covers the strip above latitude ~53 degrees, bowing poleward between vertices.
    assert 100.0 * 100.0 * 0.1 < polygon.area < 100.0 * 100.0 * 0.25


def test_exports_are_isolated(south_cap):
    loop = ArcLoop.from_polygon(south_cap)
    first = export_loop(loop, OctahedralProjector(), SegmentListSink())
    second = export_loop(loop, OctahedralProjector(), SegmentListSink())
    assert first.segment_count == second.segment_count
    assert [s.begin_uv for s in first.segments] == [s.begin_uv for s in second.segments]
    assert first.segments[0] is not second.segments[0]


def test_custom_config_threshold():
    coarse = export_loop(
        ArcLoop.from_polygon(NORTH_CAP),
        EquirectangularProjector(),
        SegmentListSink(),
        config=PipelineConfig(threshold=1e-3, snap_threshold=1e-2),
    )
    fine = export_loop(ArcLoop.from_polygon(NORTH_CAP), EquirectangularProjector(), SegmentListSink())
    assert coarse.segment_count < fine.segment_count


def test_export_rejects_broken_loop():
    loop = ArcLoop.from_polygon(UPPER_QUAD, corners=False)
    loop[1].prev = 3
    with pytest.raises(LoopError):
        export_loop(loop, OctahedralProjector(), SegmentListSink())


def test_loop_start_does_not_change_shape_count():
    loop = ArcLoop.from_polygon(SOUTH_CAP)
    ctx = export_loop(loop, OctahedralProjector(), SegmentListSink(), start=3)
    assert ctx.shapes_emitted == 4
