"""P1 — Adaptive subdivision of every edge arc into planar quadratic Beziers.

Each arc is first cut wherever its sign matrix changes: the signs of the
position and of the derivative on each axis. Charts built from coordinate
signs (octahedral folds, atan2 longitudes) can only jump where one of those
flips, so every continuous piece of the projected curve lies between two cuts.
Each piece is then split at its point of largest chordal error until every
span is within ``threshold`` of its chord, and each span becomes one Bezier.
"""

from __future__ import annotations

import logging

import numpy as np
from svgpathtools import QuadraticBezier

from globeshape.engine.context import ExportContext
from globeshape.engine.registry import Stage, export_pass
from globeshape.sphere.arc import SphericalArc
from globeshape.svg.primitives import BezierSegment
from globeshape.utils.geometry import dot2, line_intersection, point_line_distance

logger = logging.getLogger(__name__)

# (position signs, derivative signs), each over x, y, z
SignMatrix = tuple[tuple[int, int, int], tuple[int, int, int]]


def sign_matrix(arc: SphericalArc, location: float, step: float) -> SignMatrix:
    """Signs of the ground position and its forward derivative at ``location``.

    The derivative is a finite difference over ``step``; a negative step looks
    backward and is flipped so the result is always the forward slope.
    """
    here = arc.evaluate(location)
    ahead = arc.evaluate(location + step)
    direction = int(np.sign(step))
    position = tuple(int(s) for s in np.sign(here))
    slope = tuple(int(s) * direction for s in np.sign(ahead - here))
    return position, slope


def bracket_sign_change(
    ctx: ExportContext,
    arc: SphericalArc,
    range_begin: float,
    range_end: float,
    begin_signs: SignMatrix,
    end_signs: SignMatrix,
) -> tuple[float, float, SignMatrix]:
    """Bisect ``[range_begin, range_end]`` down to ``delta`` around a sign change.

    The half whose start still matches ``begin_signs`` is discarded. Returns the
    final bracket and the signs at its end.
    """
    delta = ctx.config.delta
    while range_end - range_begin > delta:
        midpoint = (range_begin + range_end) / 2
        mid_signs = sign_matrix(arc, midpoint, delta)
        if mid_signs == begin_signs:
            range_begin = midpoint
        else:
            range_end = midpoint
            end_signs = mid_signs
    return range_begin, range_end, end_signs


def max_error_location(ctx: ExportContext, arc: SphericalArc, begin: float, end: float) -> float:
    """Parameter in ``[begin, end]`` where the projected curve strays furthest from its chord."""
    delta = ctx.config.delta
    l1 = ctx.project(arc.index, begin)
    l2 = ctx.project(arc.index, end)

    while end - begin > delta:
        midpoint = (begin + end) / 2
        error_left = point_line_distance(l1, l2, ctx.project(arc.index, midpoint - delta))
        error_right = point_line_distance(l1, l2, ctx.project(arc.index, midpoint + delta))
        if error_left < error_right:
            begin = midpoint
        else:
            end = midpoint
    return (begin + end) / 2


def control_point(begin: complex, after_begin: complex, before_end: complex, end: complex) -> complex:
    """Where the end tangents meet; the chord midpoint when they do not meet usefully."""
    control = line_intersection(begin, after_begin, before_end, end)
    chord = end - begin
    length_sq = abs(chord) ** 2
    if length_sq == 0:
        return control
    # Near-parallel tangents put the intersection far outside the span.
    along = dot2(control - begin, chord) / length_sq
    if not 0.0 <= along <= 1.0:
        return (begin + end) / 2
    return control


def add_line(ctx: ExportContext, arc: SphericalArc, begin: float, end: float) -> BezierSegment | None:
    """Accept ``[begin, end]`` as one Bezier; spans shorter than ``threshold`` are dropped."""
    begin_uv = ctx.project(arc.index, begin)
    end_uv = ctx.project(arc.index, end)
    if abs(end_uv - begin_uv) <= ctx.config.threshold:
        return None

    probe = min(ctx.config.tangent_probe, (end - begin) / 2)
    after_begin = ctx.project(arc.index, begin + probe)
    before_end = ctx.project(arc.index, end - probe)

    segment = BezierSegment(
        QuadraticBezier(begin_uv, control_point(begin_uv, after_begin, before_end, end_uv), end_uv),
        arc=arc.index,
        begin=begin,
        end=end,
    )
    ctx.segments.append(segment)
    return segment


def subdivide(ctx: ExportContext, arc: SphericalArc, begin: float, end: float) -> None:
    """Split at the max-error point until each span is within ``threshold`` of its chord."""
    if end - begin > ctx.config.delta:
        midpoint = max_error_location(ctx, arc, begin, end)
        l1 = ctx.project(arc.index, begin)
        l2 = ctx.project(arc.index, end)
        p = ctx.project(arc.index, midpoint)
        if point_line_distance(l1, l2, p) > ctx.config.threshold:
            subdivide(ctx, arc, begin, midpoint)
            subdivide(ctx, arc, midpoint, end)
            return
    add_line(ctx, arc, begin, end)


def subdivide_arc(ctx: ExportContext, arc: SphericalArc) -> int:
    """Emit the segments for one arc; returns how many sign-change cuts were made."""
    delta = ctx.config.delta
    begin = 0.0
    end = arc.length
    begin_signs = sign_matrix(arc, begin, delta)
    end_signs = sign_matrix(arc, end, -delta)

    cuts = 0
    while begin_signs != end_signs:
        if cuts >= ctx.config.max_discontinuities_per_arc:
            logger.warning(
                "Arc %d: stopped after %d sign changes; remaining span emitted as-is",
                arc.index,
                cuts,
            )
            break
        range_begin, range_end, range_end_signs = bracket_sign_change(
            ctx, arc, begin, end, begin_signs, end_signs
        )
        subdivide(ctx, arc, begin, range_begin)
        begin = range_end
        begin_signs = range_end_signs
        cuts += 1

    subdivide(ctx, arc, begin, end)
    return cuts


@export_pass(
    id="P1",
    stage=Stage.SUBDIVISION,
    description="Cut arcs at sign changes and fit error-bounded quadratic Beziers",
)
def adaptive_subdivision(ctx: ExportContext) -> None:
    ctx.segments.clear()
    total_cuts = 0
    arcs = 0
    for arc in ctx.loop.edges(ctx.start):
        total_cuts += subdivide_arc(ctx, arc)
        arcs += 1
    logger.debug(
        "Subdivided %d arcs into %d segments (%d sign-change cuts)",
        arcs,
        len(ctx.segments),
        total_cuts,
    )
