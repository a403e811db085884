"""Health check + meta endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from globeshape import __version__
from globeshape.config import Settings
from globeshape.dependencies import get_settings
from globeshape.engine.registry import get_registry
from globeshape.models.responses import HealthResponse
from globeshape.sphere.projection import available_projections

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(settings: Settings = Depends(get_settings)) -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        environment=settings.globeshape_env,
        projections=available_projections(),
        passes_registered=get_registry().count,
    )
