"""API response models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = ""
    schema_version: str = ""
    tiers: list[str] = Field(default_factory=list)


class GenerationMeta(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    width: float
    height: float
    view_box: str = Field(alias="viewBox")
    palette: list[str] = Field(default_factory=list)
    description: str = ""
    seed: int | None = None


class LayerBounds(BaseModel):
    x: float
    y: float
    width: float
    height: float


class LayerInfo(BaseModel):
    id: str
    label: str
    type: str = "layer"
    bounds: LayerBounds | None = None


class GenerationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    svg: str
    meta: GenerationMeta
    layers: list[LayerInfo] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    method: str = ""
    document: dict[str, Any] | None = None
