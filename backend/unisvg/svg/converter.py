"""Convert legacy SVG markup into a unified-layered document.

Each primitive shape becomes one layer holding one path. Coordinates are
mapped from the source viewBox onto the canonical canvas for the requested
aspect ratio, clamped and rounded to 2 decimals.
"""

from __future__ import annotations

import logging
import re

from svgpathtools import Arc, CubicBezier, Line, QuadraticBezier, parse_path

from unisvg.layout import canvas
from unisvg.layout.constants import COORDINATE_PRECISION, SCHEMA_VERSION
from unisvg.models.document import (
    Canvas,
    PathCommand,
    PathStyle,
    UnifiedLayer,
    UnifiedLayeredDocument,
    UnifiedPath,
)
from unisvg.svg.tokenizer import (
    CircleNode,
    EllipseNode,
    PathNode,
    PolygonNode,
    RectNode,
    ShapeNode,
    ShapeStyle,
    parse_svg_primitives,
)

logger = logging.getLogger(__name__)

# Cubic Bezier handle length for a quarter circle
KAPPA = 0.5522847498

# Line segments used to approximate one elliptical arc segment
ARC_STEPS = 8

HEX_RGB = re.compile(r"^#[0-9A-F]{6}$")

NAMED_COLORS: dict[str, str] = {
    "black": "#000000",
    "white": "#FFFFFF",
    "red": "#FF0000",
    "green": "#008000",
    "blue": "#0000FF",
    "yellow": "#FFFF00",
    "orange": "#FFA500",
    "purple": "#800080",
    "pink": "#FFC0CB",
    "brown": "#A52A2A",
    "gray": "#808080",
    "grey": "#808080",
    "currentcolor": "#000000",
}


def normalize_color(value: str | None, default: str | None = None) -> str | None:
    """Map SVG paint values onto #RRGGBB or 'none'."""
    if value is None:
        return default
    value = value.strip()
    lowered = value.lower()
    if lowered in ("none", "transparent"):
        return "none"
    if lowered in NAMED_COLORS:
        return NAMED_COLORS[lowered]
    if value.startswith("#") and len(value) == 4:
        return "#" + "".join(ch * 2 for ch in value[1:]).upper()
    if value.startswith("#") and len(value) == 7:
        return value.upper()
    logger.debug("Unsupported paint value %r, using %s", value, default)
    return default


def normalize_palette(palette: list[str] | None, default: list[str]) -> list[str]:
    """Normalize palette entries to #RRGGBB, dropping anything that is not a color.

    Falls back to a copy of ``default`` when no entry survives.
    """
    colors: list[str] = []
    for entry in palette or []:
        color = normalize_color(entry)
        if color is None or not HEX_RGB.match(color):
            logger.debug("Dropping palette entry %r", entry)
            continue
        colors.append(color)
    return colors or list(default)


class _Mapper:
    """Source coordinates -> canonical canvas coordinates."""

    def __init__(self, view_box: tuple[float, float, float, float], width: int, height: int):
        self.min_x, self.min_y, vb_w, vb_h = view_box
        self.sx = width / vb_w if vb_w else 1.0
        self.sy = height / vb_h if vb_h else 1.0
        self.width = width
        self.height = height

    def point(self, x: float, y: float) -> list[float]:
        px = min(max((x - self.min_x) * self.sx, 0.0), self.width)
        py = min(max((y - self.min_y) * self.sy, 0.0), self.height)
        return [round(px, COORDINATE_PRECISION), round(py, COORDINATE_PRECISION)]

    def complex_point(self, z: complex) -> list[float]:
        return self.point(z.real, z.imag)


def _ellipse_commands(cx: float, cy: float, rx: float, ry: float, m: _Mapper) -> list[PathCommand]:
    kx, ky = rx * KAPPA, ry * KAPPA
    return [
        PathCommand(cmd="M", coords=m.point(cx + rx, cy)),
        PathCommand(cmd="C", coords=m.point(cx + rx, cy + ky) + m.point(cx + kx, cy + ry) + m.point(cx, cy + ry)),
        PathCommand(cmd="C", coords=m.point(cx - kx, cy + ry) + m.point(cx - rx, cy + ky) + m.point(cx - rx, cy)),
        PathCommand(cmd="C", coords=m.point(cx - rx, cy - ky) + m.point(cx - kx, cy - ry) + m.point(cx, cy - ry)),
        PathCommand(cmd="C", coords=m.point(cx + kx, cy - ry) + m.point(cx + rx, cy - ky) + m.point(cx + rx, cy)),
        PathCommand(cmd="Z"),
    ]


def _rect_commands(node: RectNode, m: _Mapper) -> list[PathCommand]:
    x, y, w, h = node.x, node.y, node.width, node.height
    rx = min(node.rx, w / 2)
    ry = min(node.ry, h / 2)
    if rx <= 0 or ry <= 0:
        return [
            PathCommand(cmd="M", coords=m.point(x, y)),
            PathCommand(cmd="L", coords=m.point(x + w, y)),
            PathCommand(cmd="L", coords=m.point(x + w, y + h)),
            PathCommand(cmd="L", coords=m.point(x, y + h)),
            PathCommand(cmd="Z"),
        ]
    return [
        PathCommand(cmd="M", coords=m.point(x + rx, y)),
        PathCommand(cmd="L", coords=m.point(x + w - rx, y)),
        PathCommand(cmd="Q", coords=m.point(x + w, y) + m.point(x + w, y + ry)),
        PathCommand(cmd="L", coords=m.point(x + w, y + h - ry)),
        PathCommand(cmd="Q", coords=m.point(x + w, y + h) + m.point(x + w - rx, y + h)),
        PathCommand(cmd="L", coords=m.point(x + rx, y + h)),
        PathCommand(cmd="Q", coords=m.point(x, y + h) + m.point(x, y + h - ry)),
        PathCommand(cmd="L", coords=m.point(x, y + ry)),
        PathCommand(cmd="Q", coords=m.point(x, y) + m.point(x + rx, y)),
        PathCommand(cmd="Z"),
    ]


def _polygon_commands(node: PolygonNode, m: _Mapper) -> list[PathCommand]:
    if not node.points:
        return []
    commands = [PathCommand(cmd="M", coords=m.point(*node.points[0]))]
    commands += [PathCommand(cmd="L", coords=m.point(*p)) for p in node.points[1:]]
    if node.closed:
        commands.append(PathCommand(cmd="Z"))
    return commands


def path_data_to_commands(d: str, m: _Mapper) -> list[PathCommand]:
    """Absolute M/L/C/Q/Z commands for arbitrary path data (arcs become lines)."""
    path = parse_path(d)
    commands: list[PathCommand] = []
    for subpath in path.continuous_subpaths():
        if len(subpath) == 0:
            continue
        commands.append(PathCommand(cmd="M", coords=m.complex_point(subpath.start)))
        for segment in subpath:
            if isinstance(segment, Line):
                commands.append(PathCommand(cmd="L", coords=m.complex_point(segment.end)))
            elif isinstance(segment, CubicBezier):
                commands.append(PathCommand(
                    cmd="C",
                    coords=m.complex_point(segment.control1) + m.complex_point(segment.control2)
                    + m.complex_point(segment.end),
                ))
            elif isinstance(segment, QuadraticBezier):
                commands.append(PathCommand(
                    cmd="Q", coords=m.complex_point(segment.control) + m.complex_point(segment.end),
                ))
            elif isinstance(segment, Arc):
                for step in range(1, ARC_STEPS + 1):
                    commands.append(PathCommand(cmd="L", coords=m.complex_point(segment.point(step / ARC_STEPS))))
        if subpath.isclosed():
            commands.append(PathCommand(cmd="Z"))
    return commands


def _style(style: ShapeStyle) -> PathStyle:
    # SVG paints an unspecified fill black
    return PathStyle(
        fill=normalize_color(style.fill, default="#000000"),
        stroke=normalize_color(style.stroke),
        stroke_width=style.stroke_width,
        stroke_linecap=style.stroke_linecap,
        stroke_linejoin=style.stroke_linejoin,
        opacity=style.opacity,
    )


def _shape_commands(shape: ShapeNode, m: _Mapper) -> list[PathCommand]:
    if isinstance(shape, CircleNode):
        return _ellipse_commands(shape.cx, shape.cy, shape.r, shape.r, m)
    if isinstance(shape, EllipseNode):
        return _ellipse_commands(shape.cx, shape.cy, shape.rx, shape.ry, m)
    if isinstance(shape, RectNode):
        return _rect_commands(shape, m)
    if isinstance(shape, PolygonNode):
        return _polygon_commands(shape, m)
    return path_data_to_commands(shape.d, m)


_KIND_NAMES = {
    CircleNode: "circle",
    EllipseNode: "ellipse",
    RectNode: "rect",
    PolygonNode: "polygon",
    PathNode: "path",
}


def convert_svg_to_document(
    svg_text: str,
    aspect_ratio: str = canvas.DEFAULT_RATIO,
    labels: dict[str, str] | None = None,
) -> UnifiedLayeredDocument:
    """Parse legacy markup and wrap every primitive in its own layer.

    labels optionally maps shape ids to human-readable layer labels.
    """
    config = canvas.get_config(aspect_ratio)
    parsed = parse_svg_primitives(svg_text)

    if parsed.view_box is not None:
        view_box = parsed.view_box
    else:
        view_box = (0.0, 0.0, parsed.width or config.width, parsed.height or config.height)
    mapper = _Mapper(view_box, config.width, config.height)

    labels = labels or {}
    layers: list[UnifiedLayer] = []
    counts: dict[str, int] = {}
    for shape in parsed.shapes:
        commands = _shape_commands(shape, mapper)
        if not commands:
            continue
        kind = _KIND_NAMES[type(shape)]
        counts[kind] = counts.get(kind, 0) + 1
        layer_id = shape.id or f"{kind}_{counts[kind]}"
        label = labels.get(shape.id) or layer_id.replace("_", " ").replace("-", " ").title()
        layers.append(UnifiedLayer(
            id=layer_id,
            label=label,
            paths=[UnifiedPath(id=f"{layer_id}_path", style=_style(shape.style), commands=commands)],
        ))

    logger.info("Converted legacy SVG: %d shapes -> %d layers", len(parsed.shapes), len(layers))
    return UnifiedLayeredDocument(
        version=SCHEMA_VERSION,
        canvas=Canvas(width=config.width, height=config.height, aspect_ratio=aspect_ratio),
        layers=layers,
    )
