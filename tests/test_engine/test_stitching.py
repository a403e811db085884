"""Tests for the stitching and assembly passes (P2-P7) on hand-built segment soups."""

from __future__ import annotations

import pytest
from svgpathtools import QuadraticBezier

from globeshape.engine.assembly.p7_shape_assembly import assemble_shapes
from globeshape.engine.context import ExportContext
from globeshape.engine.stitching.p2_clamp_to_square import clamp_to_square
from globeshape.engine.stitching.p3_snap_endpoints import snap_shared_endpoints
from globeshape.engine.stitching.p4_adjacency import build_adjacency
from globeshape.engine.stitching.p5_discontinuities import locate_discontinuities
from globeshape.engine.stitching.p6_border_stitching import connect
from globeshape.errors import TopologyError
from globeshape.sphere.loop import ArcLoop
from globeshape.sphere.projection import EquirectangularProjector
from globeshape.svg.primitives import BezierSegment
from globeshape.svg.sink import SegmentListSink


def _segment(begin: complex, end: complex) -> BezierSegment:
    return BezierSegment(QuadraticBezier(begin, (begin + end) / 2, end), arc=0, begin=0.0, end=1.0)


def _context(segments: list[BezierSegment]) -> ExportContext:
    return ExportContext(
        loop=ArcLoop(),
        projector=EquirectangularProjector(),
        sink=SegmentListSink(),
        segments=segments,
    )


def _triangle() -> list[BezierSegment]:
    return [
        _segment(0.2 + 0.2j, 0.5 + 0.8j),
        _segment(0.5 + 0.8j + 1e-6, 0.8 + 0.2j),
        _segment(0.8 + 0.2j, 0.2 + 0.2j),
    ]


def test_snap_averages_near_endpoints():
    segments = _triangle()
    ctx = _context(segments)
    snap_shared_endpoints(ctx)
    assert segments[0].end_uv == segments[1].begin_uv
    assert segments[0].end_uv == pytest.approx(0.5 + 0.8j + 5e-7)


def test_snap_leaves_seams_alone():
    segments = [_segment(0.2 + 0.5j, 0.99 + 0.5j), _segment(0.01 + 0.5j, 0.2 + 0.5j)]
    ctx = _context(segments)
    snap_shared_endpoints(ctx)
    assert segments[0].end_uv == 0.99 + 0.5j
    assert segments[1].begin_uv == 0.01 + 0.5j


def test_clamp_moves_seam_endpoints_to_border():
    segments = [_segment(0.5 + 0.5j, 0.99 + 0.5j), _segment(0.01 + 0.5j, 0.5 + 0.5j)]
    ctx = _context(segments)
    clamp_to_square(ctx)
    assert segments[0].end_uv == 1 + 0.5j
    assert segments[1].begin_uv == 0 + 0.5j
    # Welded pairs are untouched
    assert segments[1].end_uv == 0.5 + 0.5j


def test_adjacency_and_discontinuities():
    segments = _triangle()
    ctx = _context(segments)
    snap_shared_endpoints(ctx)
    build_adjacency(ctx)
    locate_discontinuities(ctx)
    assert ctx.adjacency == {
        segments[0]: segments[1],
        segments[1]: segments[2],
        segments[2]: segments[0],
    }
    assert ctx.exits == []
    assert ctx.entries == []


def test_discontinuities_recorded_in_pairs():
    segments = [_segment(0.5 + 0.5j, 1 + 0.5j), _segment(0 + 0.5j, 0.5 + 0.5j)]
    ctx = _context(segments)
    build_adjacency(ctx)
    locate_discontinuities(ctx)
    assert ctx.exits == [segments[0]]
    assert ctx.entries == [segments[1]]
    assert ctx.adjacency == {segments[1]: segments[0]}


def test_connect_inserts_corner_segments():
    exit_segment = _segment(0.5 + 0.6j, 1 + 0.6j)
    entry = _segment(0 + 0.6j, 0.5 + 0.6j)
    ctx = _context([exit_segment, entry])

    connect(ctx, exit_segment, 1.4, entry, 3.6, clockwise=False)

    assert len(ctx.connectors) == 3
    assert all(c.is_synthetic for c in ctx.connectors)
    chain = [exit_segment]
    while chain[-1] in ctx.adjacency:
        chain.append(ctx.adjacency[chain[-1]])
    assert chain[-1] is entry
    assert [c.end_uv for c in chain[1:-1]] == [1 + 1j, 0 + 1j, 0 + 0.6j]


def test_connect_coincident_points_links_directly():
    exit_segment = _segment(0.5 + 0.5j, 1 + 0.5j)
    entry = _segment(1 + 0.5j, 0.5 + 0.2j)
    ctx = _context([exit_segment, entry])
    connect(ctx, exit_segment, 1.5, entry, 1.5, clockwise=True)
    assert ctx.connectors == []
    assert ctx.adjacency[exit_segment] is entry


def test_assemble_single_shape():
    segments = _triangle()
    ctx = _context(segments)
    snap_shared_endpoints(ctx)
    build_adjacency(ctx)
    assemble_shapes(ctx)

    assert ctx.shapes_emitted == 1
    assert ctx.edges_emitted == 3
    assert ctx.adjacency == {}
    assert ctx.sink.shapes == [segments]


def test_assemble_two_shapes():
    first = _triangle()
    second = [
        _segment(2 + 2j, 3 + 2j),
        _segment(3 + 2j, 2 + 3j),
        _segment(2 + 3j, 2 + 2j),
    ]
    ctx = _context(first + second)
    for ring in (first, second):
        for a, b in zip(ring, ring[1:] + ring[:1]):
            ctx.adjacency[a] = b

    assemble_shapes(ctx)
    assert ctx.shapes_emitted == 2
    assert ctx.edges_emitted == 6


def test_assemble_open_chain_is_topology_error():
    segments = _triangle()
    ctx = _context(segments)
    ctx.adjacency[segments[0]] = segments[1]
    ctx.adjacency[segments[1]] = segments[2]
    with pytest.raises(TopologyError):
        assemble_shapes(ctx)
