"""Master API router — mounts all endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from globeshape.api import export, health

api_router = APIRouter(prefix="/api")

api_router.include_router(health.router)
api_router.include_router(export.router)
