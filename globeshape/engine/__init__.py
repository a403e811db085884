"""Loop export engine: adaptive subdivision, seam stitching, shape assembly."""

from globeshape.engine.config import PipelineConfig
from globeshape.engine.context import ExportContext
from globeshape.engine.pipeline import Pipeline, create_pipeline, export_loop
from globeshape.engine.registry import Stage, export_pass, get_registry

__all__ = [
    "PipelineConfig",
    "ExportContext",
    "Pipeline",
    "create_pipeline",
    "export_loop",
    "Stage",
    "export_pass",
    "get_registry",
]
