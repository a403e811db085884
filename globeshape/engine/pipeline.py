"""Pipeline orchestrator — runs the export passes in dependency order."""

from __future__ import annotations

import importlib
import logging
import pkgutil
import time

from globeshape.engine.config import PipelineConfig
from globeshape.engine.context import ExportContext
from globeshape.engine.registry import PassRegistry, Stage, get_registry
from globeshape.sphere.loop import ArcLoop
from globeshape.sphere.projection import SphereToPlaneProjector
from globeshape.svg.sink import ShapeSink

logger = logging.getLogger(__name__)

_PASS_PACKAGES = ["subdivision", "stitching", "assembly"]


def register_passes() -> None:
    """Import all pass modules so @export_pass decorators fire."""
    for package_name in _PASS_PACKAGES:
        package = importlib.import_module(f"globeshape.engine.{package_name}")
        for _, module_name, _ in pkgutil.iter_modules(package.__path__):
            importlib.import_module(f"{package.__name__}.{module_name}")


class Pipeline:
    """Orchestrates the export passes."""

    def __init__(self, registry: PassRegistry | None = None) -> None:
        self.registry = registry or get_registry()

    def run(self, ctx: ExportContext) -> ExportContext:
        """Run every registered pass on the given context.

        A failing pass leaves the context half-stitched, so the error is
        logged and re-raised rather than recorded.
        """
        start = time.perf_counter()
        ordered = self.registry.resolve_order()
        logger.debug("Pipeline: %d passes queued", len(ordered))

        for spec in ordered:
            t0 = time.perf_counter()
            try:
                spec.fn(ctx)
            except Exception as e:
                logger.error("  %s FAILED: %s", spec.id, e)
                raise
            ctx.completed_passes.append(spec.id)
            elapsed = (time.perf_counter() - t0) * 1000
            logger.debug("  %s completed in %.1fms", spec.id, elapsed)

        total = (time.perf_counter() - start) * 1000
        logger.info(
            "Export complete: %d segments, %d connectors, %d shapes in %.0fms",
            ctx.segment_count,
            len(ctx.connectors),
            ctx.shapes_emitted,
            total,
        )
        return ctx

    def run_stage(self, ctx: ExportContext, stage: Stage) -> ExportContext:
        """Run only the passes of one stage, in dependency order."""
        for spec in self.registry.resolve_order():
            if spec.stage != stage:
                continue
            spec.fn(ctx)
            ctx.completed_passes.append(spec.id)
        return ctx


def create_pipeline() -> Pipeline:
    """Factory for a pipeline over the built-in passes."""
    register_passes()
    return Pipeline()


def export_loop(
    loop: ArcLoop,
    projector: SphereToPlaneProjector,
    sink: ShapeSink,
    config: PipelineConfig | None = None,
    start: int = 0,
) -> ExportContext:
    """Flatten one closed loop through ``projector`` and emit its shapes into ``sink``."""
    loop.validate(start)
    ctx = ExportContext(
        loop=loop,
        projector=projector,
        sink=sink,
        config=config or PipelineConfig(),
        start=start,
    )
    return create_pipeline().run(ctx)
