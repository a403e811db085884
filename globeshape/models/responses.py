"""API response models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    environment: str = "development"
    projections: list[str] = Field(default_factory=list)
    passes_registered: int = 0


class ShapeSummary(BaseModel):
    d: str
    edges: int = 0
    area: float = 0.0


class ExportResponse(BaseModel):
    svg: str
    projection: str
    shapes: list[ShapeSummary] = Field(default_factory=list)
    segment_count: int = 0
    connector_count: int = 0
    processing_time_ms: float = 0.0
