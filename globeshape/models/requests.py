"""API request models."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class ExportRequest(BaseModel):
    vertices: list[list[float]] = Field(
        ...,
        min_length=3,
        description="Polygon vertices on the sphere as [x, y, z]; normalized before use",
    )
    projection: str | None = Field(
        default=None,
        description="Chart name (octahedral, equirectangular); server default when omitted",
    )
    canvas_size: float | None = Field(default=None, gt=0, description="SVG canvas edge length")
    corners: bool = Field(default=True, description="Insert joint arcs at every vertex")
    fill: str = Field(default="#4ECDC4", description="Fill colour of the exported shapes")

    @field_validator("vertices")
    @classmethod
    def _three_components(cls, value: list[list[float]]) -> list[list[float]]:
        for vertex in value:
            if len(vertex) != 3:
                raise ValueError(f"vertex {vertex} must have exactly 3 components")
            if not any(vertex):
                raise ValueError("vertices must be non-zero")
        return value
