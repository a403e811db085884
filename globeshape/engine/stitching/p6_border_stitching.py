"""P6 — Close the outline along the square border between seams.

Each exit is joined to the nearest unclaimed entry in the direction where the
block interior lies, walking the border and dropping a straight segment at
every corner passed on the way.

The interior side comes from the sphere: ``evaluate_normal`` points into the
block, so projecting a small step along it from the middle of the exit
segment tells which side of the planar curve the block is on. The projection
may mirror the plane (the octahedral fold does), which is why this is
measured rather than assumed.
"""

from __future__ import annotations

import logging

from globeshape.engine.border import CORNERS, clockwise_direction, corners_between, perimeter_key
from globeshape.engine.context import ExportContext
from globeshape.engine.registry import Stage, export_pass
from globeshape.errors import TopologyError
from globeshape.svg.primitives import BezierSegment
from globeshape.utils.geometry import cross2, dot2, normalize

logger = logging.getLogger(__name__)

# Probe step into the block, as a fraction of the segment's arc length.
_INTERIOR_PROBE_FRACTION = 0.1


def interior_side(ctx: ExportContext, segment: BezierSegment) -> int:
    """+1 if the block lies left of the segment's planar direction of travel, -1 if right."""
    arc = ctx.loop[segment.arc]
    span = segment.end - segment.begin
    middle = (segment.begin + segment.end) / 2
    h = min(ctx.config.tangent_probe, span / 2)

    here = arc.evaluate(middle)
    tangent = ctx.project(arc.index, middle + h) - ctx.project(arc.index, middle - h)
    inside = normalize(here + _INTERIOR_PROBE_FRACTION * span * arc.evaluate_normal(middle))
    inward = complex(ctx.projector.project(inside)) - complex(ctx.projector.project(here))

    turn = cross2(tangent, inward)
    if turn == 0:
        logger.warning("Interior side of arc %d is ambiguous; assuming left", arc.index)
        return 1
    return 1 if turn > 0 else -1


def walks_clockwise(ctx: ExportContext, exit_segment: BezierSegment, key: float) -> bool:
    """Does the border from this exit toward the interior run clockwise?"""
    tangent = exit_segment.end_uv - exit_segment.control_point
    if tangent == 0:
        tangent = exit_segment.end_uv - exit_segment.begin_uv
    inward = 1j * tangent * interior_side(ctx, exit_segment)
    return dot2(inward, clockwise_direction(key)) > 0


def _nearest_entry(
    entries: list[tuple[float, BezierSegment]],
    key: float,
    clockwise: bool,
    claimed: set[int],
) -> tuple[float, BezierSegment] | None:
    best: tuple[float, BezierSegment] | None = None
    best_distance = 5.0
    for entry_key, entry in entries:
        if id(entry) in claimed:
            continue
        distance = (entry_key - key) % 4 if clockwise else (key - entry_key) % 4
        if distance < best_distance:
            best, best_distance = (entry_key, entry), distance
    return best


def connect(
    ctx: ExportContext,
    exit_segment: BezierSegment,
    exit_key: float,
    entry: BezierSegment,
    entry_key: float,
    clockwise: bool,
) -> None:
    """Chain stitching segments from ``exit_segment`` round the corners to ``entry``."""
    last = exit_segment
    position = exit_segment.end_uv
    for corner in corners_between(exit_key, entry_key, clockwise):
        connector = BezierSegment.synthetic(position, CORNERS[corner])
        ctx.adjacency[last] = connector
        ctx.connectors.append(connector)
        last, position = connector, CORNERS[corner]

    if position != entry.begin_uv:
        connector = BezierSegment.synthetic(position, entry.begin_uv)
        ctx.adjacency[last] = connector
        ctx.connectors.append(connector)
        last = connector
    ctx.adjacency[last] = entry


@export_pass(
    id="P6",
    stage=Stage.STITCHING,
    dependencies=["P5"],
    description="Pair seams by perimeter key and stitch them along the border",
)
def stitch_discontinuities(ctx: ExportContext) -> None:
    ctx.connectors.clear()
    if not ctx.exits:
        return

    exits = sorted(((perimeter_key(s.end_uv), s) for s in ctx.exits), key=lambda item: item[0])
    entries = sorted(((perimeter_key(s.begin_uv), s) for s in ctx.entries), key=lambda item: item[0])

    claimed: set[int] = set()
    for exit_key, exit_segment in exits:
        clockwise = walks_clockwise(ctx, exit_segment, exit_key)
        match = _nearest_entry(entries, exit_key, clockwise, claimed)
        if match is None:
            raise TopologyError(f"no entry left to pair with the exit at perimeter key {exit_key:.6f}")
        entry_key, entry = match
        claimed.add(id(entry))
        connect(ctx, exit_segment, exit_key, entry, entry_key, clockwise)
        logger.debug(
            "Stitched %.6f -> %.6f (%s)",
            exit_key,
            entry_key,
            "clockwise" if clockwise else "counterclockwise",
        )
