"""P5 — Record the segments on either side of every remaining gap.

An exit is a segment whose end sits on the border with nothing after it; an
entry is the segment that resumes the outline elsewhere on the border.
"""

from __future__ import annotations

import logging

from globeshape.engine.context import ExportContext
from globeshape.engine.registry import Stage, export_pass

logger = logging.getLogger(__name__)


@export_pass(
    id="P5",
    stage=Stage.STITCHING,
    dependencies=["P4"],
    description="Collect exit/entry segments at seams",
)
def locate_discontinuities(ctx: ExportContext) -> None:
    ctx.exits.clear()
    ctx.entries.clear()
    segments = ctx.segments
    for index, first in enumerate(segments):
        second = segments[(index + 1) % len(segments)]
        if first.end_uv != second.begin_uv:
            logger.debug("Seam: %s -> %s", first.end_uv, second.begin_uv)
            ctx.exits.append(first)
            ctx.entries.append(second)
