"""ExportContext — the per-call state flowing through the export passes.

Every export builds a fresh context; nothing here is shared between calls,
so independent shapes can be exported in parallel against the same
(read-only) ArcLoop.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from globeshape.engine.config import PipelineConfig
from globeshape.sphere.loop import ArcLoop
from globeshape.sphere.projection import SphereToPlaneProjector
from globeshape.svg.primitives import BezierSegment
from globeshape.svg.sink import ShapeSink


@dataclass
class ExportContext:
    """Shared state for exporting one loop."""

    loop: ArcLoop
    projector: SphereToPlaneProjector
    sink: ShapeSink
    config: PipelineConfig = field(default_factory=PipelineConfig)
    # Arc to start from; any member of the loop works
    start: int = 0

    # --- Subdivision output (loop order) ---
    segments: list[BezierSegment] = field(default_factory=list)

    # --- Stitching state ---
    # Successor of each segment once the shapes are closed
    adjacency: dict[BezierSegment, BezierSegment] = field(default_factory=dict)
    # Segments whose end lies on the border with no continuation
    exits: list[BezierSegment] = field(default_factory=list)
    # Segments whose begin lies on the border with no predecessor
    entries: list[BezierSegment] = field(default_factory=list)
    # Stitching segments added along the border
    connectors: list[BezierSegment] = field(default_factory=list)

    # --- Results ---
    shapes_emitted: int = 0
    edges_emitted: int = 0

    # --- Pipeline metadata ---
    completed_passes: list[str] = field(default_factory=list)

    def project(self, arc_index: int, t: float) -> complex:
        """Plane position of the ground point at ``t`` on arc ``arc_index``."""
        return complex(self.projector.project(self.loop[arc_index].evaluate(t)))

    @property
    def segment_count(self) -> int:
        return len(self.segments)
