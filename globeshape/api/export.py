"""POST /api/export — flatten one polygon and return its SVG shapes."""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends, HTTPException

from globeshape.config import Settings
from globeshape.dependencies import get_settings
from globeshape.engine.pipeline import export_loop
from globeshape.errors import GlobeShapeError
from globeshape.models.requests import ExportRequest
from globeshape.models.responses import ExportResponse, ShapeSummary
from globeshape.sphere.loop import ArcLoop
from globeshape.sphere.projection import get_projector
from globeshape.svg.sink import SvgShapeSink

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/export", response_model=ExportResponse)
def export(req: ExportRequest, settings: Settings = Depends(get_settings)) -> ExportResponse:
    start = time.perf_counter()
    projection = req.projection or settings.default_projection
    canvas_size = req.canvas_size or settings.canvas_size

    try:
        projector = get_projector(projection)
        loop = ArcLoop.from_polygon(req.vertices, corners=req.corners)
        sink = SvgShapeSink(canvas_size=canvas_size)
        ctx = export_loop(loop, projector, sink)
    except (GlobeShapeError, ValueError) as e:
        logger.warning("Export failed: %s", e)
        raise HTTPException(status_code=422, detail=str(e)) from e

    areas = [poly.area for poly in sink.polygons()]
    shapes = [
        ShapeSummary(d=d, edges=edges, area=round(area, 6))
        for d, edges, area in zip(sink.path_data(), sink.edge_counts, areas)
    ]
    elapsed = (time.perf_counter() - start) * 1000

    return ExportResponse(
        svg=sink.to_svg(fill=req.fill, title=f"{projection} export"),
        projection=projection,
        shapes=shapes,
        segment_count=ctx.segment_count,
        connector_count=len(ctx.connectors),
        processing_time_ms=round(elapsed, 1),
    )
