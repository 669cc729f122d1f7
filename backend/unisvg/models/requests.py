"""API request models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from unisvg.layout import canvas


class CanvasSize(BaseModel):
    width: float = Field(gt=0)
    height: float = Field(gt=0)


class GenerationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    prompt: str = Field(..., description="Natural-language description of the image")
    size: CanvasSize | None = None
    aspect_ratio: str | None = Field(default=None, alias="aspectRatio")
    palette: list[str] | None = None
    seed: int | None = None
    model: str = "unified"
    max_retries: int | None = Field(default=None, ge=0, alias="maxRetries")
    timeout_ms: int | None = Field(default=None, gt=0, alias="timeoutMs")
    fallback_enabled: bool | None = Field(default=None, alias="fallbackEnabled")

    def resolved_aspect_ratio(self) -> str:
        """Explicit valid ratio tag, else closest to the requested size, else 1:1."""
        if self.aspect_ratio and canvas.is_valid_ratio(self.aspect_ratio):
            return self.aspect_ratio
        if self.size is not None:
            return canvas.get_closest_ratio(self.size.width, self.size.height)
        return canvas.default_ratio()


class ValidateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    document: dict[str, Any]
    auto_fix: bool = Field(default=True, alias="autoFix")
