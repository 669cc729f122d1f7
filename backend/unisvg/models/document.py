"""Unified-layered document schema.

Input parsing is permissive: colors, command tags, arities, offsets and
counts are accepted as-is and judged by the validator, which reports them
in a ValidationReport.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from unisvg.layout.constants import COORDINATE_PRECISION, SCHEMA_VERSION


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class AbsoluteSize(WireModel):
    width: float
    height: float


class AspectConstrainedSize(WireModel):
    width: float
    aspect: float


class SizeSpec(WireModel):
    """At most one of the three variants may be set."""

    absolute: AbsoluteSize | None = None
    relative: float | None = None
    aspect_constrained: AspectConstrainedSize | None = None

    def variants_set(self) -> list[str]:
        return [
            name
            for name in ("absolute", "relative", "aspect_constrained")
            if getattr(self, name) is not None
        ]


class RepeatSpec(WireModel):
    type: str
    count: int | list[int] = 1
    spacing: float | None = None
    radius: float | None = None


class LayoutSpecification(WireModel):
    region: str | None = None
    anchor: str | None = None
    offset: list[float] | None = None
    size: SizeSpec | None = None
    repeat: RepeatSpec | None = None
    z_index: int | None = Field(default=None, alias="zIndex")


class PathCommand(WireModel):
    cmd: str
    coords: list[float] = Field(default_factory=list)


class PathStyle(WireModel):
    fill: str | None = None
    stroke: str | None = None
    stroke_width: float | None = Field(default=None, alias="strokeWidth")
    stroke_linecap: str | None = Field(default=None, alias="strokeLinecap")
    stroke_linejoin: str | None = Field(default=None, alias="strokeLinejoin")
    opacity: float | None = None


class UnifiedPath(WireModel):
    id: str = ""
    style: PathStyle = Field(default_factory=PathStyle)
    commands: list[PathCommand] = Field(default_factory=list)
    layout: LayoutSpecification | None = None


class UnifiedLayer(WireModel):
    id: str = ""
    label: str = ""
    layout: LayoutSpecification | None = None
    paths: list[UnifiedPath] = Field(default_factory=list)


class Canvas(WireModel):
    width: float
    height: float
    aspect_ratio: str = Field(default="1:1", alias="aspectRatio")


class CustomRegion(WireModel):
    name: str = ""
    x: float
    y: float
    width: float
    height: float


class DocumentLayout(WireModel):
    custom_regions: list[CustomRegion] = Field(default_factory=list, alias="customRegions")
    global_anchor: str | None = Field(default=None, alias="globalAnchor")
    global_offset: list[float] | None = Field(default=None, alias="globalOffset")


class UnifiedLayeredDocument(WireModel):
    version: str = SCHEMA_VERSION
    canvas: Canvas | None = None
    layout: DocumentLayout | None = None
    layers: list[UnifiedLayer] = Field(default_factory=list)

    def iter_paths(self):
        """Yield (layer, path) pairs in document order."""
        for layer in self.layers:
            for path in layer.paths:
                yield layer, path

    def to_wire(self) -> dict[str, Any]:
        """Canonical JSON form: camelCase keys, coordinates at 2 decimals."""
        data = self.model_dump(by_alias=True, exclude_none=True)
        for layer in data.get("layers", []):
            for path in layer.get("paths", []):
                for command in path.get("commands", []):
                    command["coords"] = [
                        round(c, COORDINATE_PRECISION) for c in command["coords"]
                    ]
        return data
