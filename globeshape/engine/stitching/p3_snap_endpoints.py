"""P3 — Weld near-coincident endpoints of consecutive segments.

Floating-point noise leaves neighbouring segments a hair apart; averaging the
two endpoints makes them compare equal, which adjacency relies on.
"""

from __future__ import annotations

from globeshape.engine.context import ExportContext
from globeshape.engine.registry import Stage, export_pass


@export_pass(
    id="P3",
    stage=Stage.STITCHING,
    dependencies=["P2"],
    description="Average shared endpoints closer than the snap threshold",
)
def snap_shared_endpoints(ctx: ExportContext) -> None:
    segments = ctx.segments
    for index, first in enumerate(segments):
        second = segments[(index + 1) % len(segments)]
        if abs(first.end_uv - second.begin_uv) < ctx.config.snap_threshold:
            shared = (first.end_uv + second.begin_uv) / 2
            first.end_uv = shared
            second.begin_uv = shared
