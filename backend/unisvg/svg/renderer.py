"""Write SVG markup from a unified-layered document."""

from __future__ import annotations

import json
import logging
from html import escape

from unisvg.layout import canvas
from unisvg.layout.constants import DEFAULT_ANCHOR, DEFAULT_REGION
from unisvg.layout.coordinate_mapper import CoordinateMapper, LayoutIssue
from unisvg.layout.geometry import Bounds
from unisvg.layout.regions import RegionResolver
from unisvg.models.document import (
    LayoutSpecification,
    PathCommand,
    PathStyle,
    UnifiedLayer,
    UnifiedLayeredDocument,
    UnifiedPath,
)

logger = logging.getLogger(__name__)


def format_number(value: float) -> str:
    """Integers plain, everything else at 2 decimals."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}"


def build_path_data(commands: list[PathCommand]) -> str:
    parts = []
    for command in commands:
        if command.cmd == "Z":
            parts.append("Z")
        else:
            parts.append(" ".join([command.cmd] + [format_number(c) for c in command.coords]))
    return " ".join(parts)


def _attr(value: object) -> str:
    return escape(str(value), quote=True)


def _style_attrs(style: PathStyle) -> list[str]:
    attrs = [f'fill="{_attr(style.fill or "none")}"', f'stroke="{_attr(style.stroke or "none")}"']
    if style.stroke_width is not None:
        attrs.append(f'stroke-width="{format_number(style.stroke_width)}"')
    if style.stroke_linecap:
        attrs.append(f'stroke-linecap="{_attr(style.stroke_linecap)}"')
    if style.stroke_linejoin:
        attrs.append(f'stroke-linejoin="{_attr(style.stroke_linejoin)}"')
    if style.opacity is not None:
        attrs.append(f'opacity="{format_number(style.opacity)}"')
    return attrs


def _layout_attrs(layout: LayoutSpecification | None) -> list[str]:
    if layout is None:
        return []
    attrs = []
    if layout.region:
        attrs.append(f'data-region="{_attr(layout.region)}"')
    if layout.anchor:
        attrs.append(f'data-anchor="{_attr(layout.anchor)}"')
    if layout.offset:
        attrs.append(f'data-offset="{",".join(format_number(v) for v in layout.offset)}"')
    if layout.size:
        attrs.append(f'data-size="{_attr(json.dumps(layout.size.model_dump(exclude_none=True)))}"')
    if layout.repeat:
        attrs.append(f'data-repeat="{_attr(json.dumps(layout.repeat.model_dump(exclude_none=True)))}"')
    return attrs


class DocumentRenderer:
    """Renders documents onto their canonical canvas.

    Path commands are absolute canvas coordinates unless the effective
    layout (path, then layer, then document) moves them away from the
    canvas center; in that case they are local to the resolved anchor point.
    """

    def __init__(self, display_width: float | None = None, display_height: float | None = None):
        self.display_width = display_width
        self.display_height = display_height

    def render(self, document: UnifiedLayeredDocument) -> str:
        ratio = document.canvas.aspect_ratio if document.canvas else canvas.DEFAULT_RATIO
        if not canvas.is_valid_ratio(ratio):
            ratio = canvas.DEFAULT_RATIO
        config = canvas.get_config(ratio)
        resolver = RegionResolver(ratio)
        if document.layout is not None:
            for region in document.layout.custom_regions:
                resolver.add_custom_region(region.name, Bounds(region.x, region.y, region.width, region.height))
        mapper = CoordinateMapper(resolver)

        width = self.display_width or (document.canvas.width if document.canvas else config.width)
        height = self.display_height or (document.canvas.height if document.canvas else config.height)
        lines = [
            f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="{config.view_box}"'
            f' width="{format_number(width)}" height="{format_number(height)}">'
        ]
        for layer in document.layers:
            lines.extend(self._render_layer(layer, document, mapper))
        lines.append("</svg>")
        return "\n".join(lines)

    def _render_layer(
        self, layer: UnifiedLayer, document: UnifiedLayeredDocument, mapper: CoordinateMapper
    ) -> list[str]:
        attrs = [f'id="{_attr(layer.id)}"', f'data-label="{_attr(layer.label)}"']
        if layer.layout is not None:
            if layer.layout.region:
                attrs.append(f'data-region="{_attr(layer.layout.region)}"')
            if layer.layout.anchor:
                attrs.append(f'data-anchor="{_attr(layer.layout.anchor)}"')
            if layer.layout.z_index is not None:
                attrs.append(f'data-z-index="{layer.layout.z_index}"')

        lines = [f"  <!-- Layer: {escape(layer.label)} -->", f"  <g {' '.join(attrs)}>"]
        for path in layer.paths:
            commands = self._place(path, layer, document, mapper)
            path_attrs = [f'id="{_attr(path.id)}"', f'd="{build_path_data(commands)}"']
            path_attrs += _style_attrs(path.style) + _layout_attrs(path.layout)
            lines.append(f"    <path {' '.join(path_attrs)}/>")
        lines.append("  </g>")
        return lines

    @staticmethod
    def effective_layout(
        path: UnifiedPath, layer: UnifiedLayer, document: UnifiedLayeredDocument
    ) -> LayoutSpecification:
        path_layout = path.layout or LayoutSpecification()
        layer_layout = layer.layout or LayoutSpecification()
        doc_layout = document.layout
        return LayoutSpecification(
            region=path_layout.region or layer_layout.region or DEFAULT_REGION,
            anchor=path_layout.anchor or layer_layout.anchor
            or (doc_layout.global_anchor if doc_layout else None) or DEFAULT_ANCHOR,
            offset=path_layout.offset or layer_layout.offset
            or (doc_layout.global_offset if doc_layout else None) or [0.0, 0.0],
            repeat=path_layout.repeat or layer_layout.repeat,
        )

    def _place(
        self,
        path: UnifiedPath,
        layer: UnifiedLayer,
        document: UnifiedLayeredDocument,
        mapper: CoordinateMapper,
    ) -> list[PathCommand]:
        spec = self.effective_layout(path, layer, document)
        untouched = (
            spec.region == DEFAULT_REGION
            and spec.anchor == DEFAULT_ANCHOR
            and not any(spec.offset)
            and spec.repeat is None
        )
        if untouched:
            return path.commands

        placed = mapper.transform_path_commands(path.commands, spec)
        if isinstance(placed, LayoutIssue):
            logger.warning("Path %s keeps raw coordinates: %s", path.id, placed.message)
            return path.commands
        return placed


def render_document(document: UnifiedLayeredDocument, **kwargs) -> str:
    return DocumentRenderer(**kwargs).render(document)
