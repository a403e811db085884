"""P2 — Clamp seam endpoints onto the unit-square border.

Where consecutive segments do not meet, the chart jumped between them. Both
loose ends are slid outward along their control-point line onto the border,
which is where the seam lives in the plane.
"""

from __future__ import annotations

import logging

from globeshape.engine.border import project_onto_square
from globeshape.engine.context import ExportContext
from globeshape.engine.registry import Stage, export_pass

logger = logging.getLogger(__name__)


@export_pass(
    id="P2",
    stage=Stage.STITCHING,
    dependencies=["P1"],
    description="Project seam endpoints onto the unit-square border",
)
def clamp_to_square(ctx: ExportContext) -> None:
    segments = ctx.segments
    clamped = 0
    for index, first in enumerate(segments):
        second = segments[(index + 1) % len(segments)]
        if abs(first.end_uv - second.begin_uv) > ctx.config.snap_threshold:
            first.end_uv = project_onto_square(first.end_uv, first.control_point)
            second.begin_uv = project_onto_square(second.begin_uv, second.control_point)
            clamped += 1
    logger.debug("Clamped %d seam crossings onto the border", clamped)
