"""P4 — Link each segment to the one that continues it."""

from __future__ import annotations

from globeshape.engine.context import ExportContext
from globeshape.engine.registry import Stage, export_pass


@export_pass(
    id="P4",
    stage=Stage.STITCHING,
    dependencies=["P3"],
    description="Map segments to successors sharing an endpoint",
)
def build_adjacency(ctx: ExportContext) -> None:
    ctx.adjacency.clear()
    segments = ctx.segments
    for index, first in enumerate(segments):
        second = segments[(index + 1) % len(segments)]
        if first.end_uv == second.begin_uv:
            ctx.adjacency[first] = second
