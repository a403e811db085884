"""P7 — Walk the adjacency map and hand each closed shape to the sink."""

from __future__ import annotations

import logging

from globeshape.engine.context import ExportContext
from globeshape.engine.registry import Stage, export_pass
from globeshape.errors import TopologyError

logger = logging.getLogger(__name__)


@export_pass(
    id="P7",
    stage=Stage.ASSEMBLY,
    dependencies=["P6"],
    description="Emit closed shapes by following segment successors",
)
def assemble_shapes(ctx: ExportContext) -> None:
    # A single outline may come out as several shapes, e.g. a zig-zag across
    # two folded octahedral faces gives one shape per zig and zag plus one.
    adjacency = ctx.adjacency
    while adjacency:
        first = next(iter(adjacency))
        current = first

        ctx.sink.begin_shape()
        edges = 0
        while True:
            ctx.sink.add_edge(current)
            edges += 1
            try:
                current = adjacency.pop(current)
            except KeyError:
                raise TopologyError(f"{current!r} has no successor; the outline does not close") from None
            if current is first:
                break
        ctx.sink.end_shape()

        ctx.shapes_emitted += 1
        ctx.edges_emitted += edges
        logger.debug("Shape %d: %d edges", ctx.shapes_emitted, edges)
