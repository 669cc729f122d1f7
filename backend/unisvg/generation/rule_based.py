"""Deterministic keyword-driven shape generation.

Each template is picked by prompt keywords. Circle, rect and star have
specialized generators that build unified documents directly; every other
template draws legacy markup that goes through the primitive converter.
Given the same request and seed the output is byte-identical.
"""

from __future__ import annotations

import hashlib
import logging
import math
import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from unisvg.layout import canvas
from unisvg.layout.canvas import CanvasConfig
from unisvg.layout.constants import COORDINATE_PRECISION, SCHEMA_VERSION
from unisvg.models.document import (
    Canvas,
    LayoutSpecification,
    PathCommand,
    PathStyle,
    UnifiedLayer,
    UnifiedLayeredDocument,
    UnifiedPath,
)
from unisvg.models.requests import GenerationRequest
from unisvg.svg.converter import KAPPA, convert_svg_to_document, normalize_palette

logger = logging.getLogger(__name__)

DEFAULT_PALETTE = ["#3B82F6", "#1E40AF", "#1D4ED8"]

COLOR_WORDS: dict[str, str] = {
    "red": "#EF4444",
    "orange": "#F97316",
    "yellow": "#EAB308",
    "green": "#22C55E",
    "teal": "#14B8A6",
    "blue": "#3B82F6",
    "indigo": "#6366F1",
    "purple": "#A855F7",
    "pink": "#EC4899",
    "brown": "#92400E",
    "gray": "#6B7280",
    "grey": "#6B7280",
    "black": "#111827",
    "white": "#F9FAFB",
    "gold": "#F59E0B",
}


class ShapeKind(str, Enum):
    CIRCLE = "circle"
    RECT = "rect"
    STAR = "star"
    GENERIC = "generic"


@dataclass(frozen=True)
class ShapeTemplate:
    name: str
    keywords: tuple[str, ...]
    kind: ShapeKind = ShapeKind.GENERIC


@dataclass(frozen=True)
class RuleBasedOutput:
    document: UnifiedLayeredDocument
    template: str
    colors: list[str]
    seed: int


def _r(value: float) -> float:
    return round(value, COORDINATE_PRECISION)


def _cmd(tag: str, *coords: float) -> PathCommand:
    return PathCommand(cmd=tag, coords=[_r(c) for c in coords])


def _centered_layout() -> LayoutSpecification:
    return LayoutSpecification(region="center", anchor="center")


def _document(config: CanvasConfig, layers: list[UnifiedLayer]) -> UnifiedLayeredDocument:
    return UnifiedLayeredDocument(
        version=SCHEMA_VERSION,
        canvas=Canvas(width=config.width, height=config.height, aspect_ratio=config.ratio_tag),
        layers=layers,
    )


def _pick(colors: list[str], rng: random.Random) -> str:
    return colors[rng.randrange(len(colors))]


# ---------------------------------------------------------------------------
# Unified generators: (canvas, colors, seed) -> document
# ---------------------------------------------------------------------------


def circle_commands(cx: float, cy: float, r: float) -> list[PathCommand]:
    k = r * KAPPA
    return [
        _cmd("M", cx + r, cy),
        _cmd("C", cx + r, cy + k, cx + k, cy + r, cx, cy + r),
        _cmd("C", cx - k, cy + r, cx - r, cy + k, cx - r, cy),
        _cmd("C", cx - r, cy - k, cx - k, cy - r, cx, cy - r),
        _cmd("C", cx + k, cy - r, cx + r, cy - k, cx + r, cy),
        _cmd("Z"),
    ]


def generate_circle(config: CanvasConfig, colors: list[str], seed: int) -> UnifiedLayeredDocument:
    rng = random.Random(seed)
    w, h = config.width, config.height
    radius = min(w, h) * (0.3 + rng.random() * 0.2) / 2
    color = _pick(colors, rng)
    has_stroke = rng.random() > 0.5
    has_fill = rng.random() > 0.3
    style = PathStyle(
        fill=color if has_fill or not has_stroke else "none",
        stroke=_pick(colors, rng) if has_stroke else None,
        stroke_width=2 if has_stroke else None,
    )
    path = UnifiedPath(id="circle_path", style=style, commands=circle_commands(w / 2, h / 2, radius))
    return _document(config, [
        UnifiedLayer(id="circle", label="Circle", layout=_centered_layout(), paths=[path]),
    ])


def generate_rect(config: CanvasConfig, colors: list[str], seed: int) -> UnifiedLayeredDocument:
    rng = random.Random(seed)
    w, h = config.width, config.height
    x0, y0 = w * 0.1, h * 0.1
    x1, y1 = w * 0.9, h * 0.9
    color = _pick(colors, rng)
    if rng.random() > 0.6:
        r = min(x1 - x0, y1 - y0) * 0.1
        commands = [
            _cmd("M", x0 + r, y0),
            _cmd("L", x1 - r, y0),
            _cmd("Q", x1, y0, x1, y0 + r),
            _cmd("L", x1, y1 - r),
            _cmd("Q", x1, y1, x1 - r, y1),
            _cmd("L", x0 + r, y1),
            _cmd("Q", x0, y1, x0, y1 - r),
            _cmd("L", x0, y0 + r),
            _cmd("Q", x0, y0, x0 + r, y0),
            _cmd("Z"),
        ]
    else:
        commands = [_cmd("M", x0, y0), _cmd("L", x1, y0), _cmd("L", x1, y1), _cmd("L", x0, y1), _cmd("Z")]
    path = UnifiedPath(id="rect_path", style=PathStyle(fill=color), commands=commands)
    return _document(config, [
        UnifiedLayer(id="rectangle", label="Rectangle", layout=_centered_layout(), paths=[path]),
    ])


def generate_star(config: CanvasConfig, colors: list[str], seed: int) -> UnifiedLayeredDocument:
    rng = random.Random(seed)
    w, h = config.width, config.height
    outer = min(w, h) * 0.4
    inner = outer * 0.4
    commands = []
    for i in range(10):
        angle = i * math.pi / 5 - math.pi / 2
        radius = outer if i % 2 == 0 else inner
        commands.append(_cmd("M" if i == 0 else "L", w / 2 + radius * math.cos(angle), h / 2 + radius * math.sin(angle)))
    commands.append(_cmd("Z"))
    path = UnifiedPath(id="star_path", style=PathStyle(fill=_pick(colors, rng)), commands=commands)
    return _document(config, [
        UnifiedLayer(id="star", label="Star", layout=_centered_layout(), paths=[path]),
    ])


UNIFIED_GENERATORS: dict[ShapeKind, Callable[[CanvasConfig, list[str], int], UnifiedLayeredDocument]] = {
    ShapeKind.CIRCLE: generate_circle,
    ShapeKind.RECT: generate_rect,
    ShapeKind.STAR: generate_star,
}


# ---------------------------------------------------------------------------
# Legacy markup templates: (width, height, colors, rng) -> svg text
# ---------------------------------------------------------------------------


def _fmt(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".")


def _points(points: list[tuple[float, float]]) -> str:
    return " ".join(f"{_fmt(x)},{_fmt(y)}" for x, y in points)


def _regular_polygon(w: float, h: float, sides: int, rotation: float) -> list[tuple[float, float]]:
    radius = min(w, h) * 0.4
    return [
        (w / 2 + radius * math.cos(rotation + 2 * math.pi * i / sides),
         h / 2 + radius * math.sin(rotation + 2 * math.pi * i / sides))
        for i in range(sides)
    ]


def _wrap(w: float, h: float, body: list[str]) -> str:
    return "\n".join([f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 {w} {h}">', *body, "</svg>"])


def _triangle(w, h, colors, rng):
    pts = [(w / 2, h * 0.1), (w * 0.9, h * 0.9), (w * 0.1, h * 0.9)]
    return _wrap(w, h, [f'<polygon id="triangle" points="{_points(pts)}" fill="{_pick(colors, rng)}"/>'])


def _polygon_template(sides: int, name: str):
    def build(w, h, colors, rng):
        pts = _regular_polygon(w, h, sides, -math.pi / 2 + rng.random() * 0.2)
        return _wrap(w, h, [f'<polygon id="{name}" points="{_points(pts)}" fill="{_pick(colors, rng)}"/>'])
    return build


def _diamond(w, h, colors, rng):
    pts = [(w / 2, h * 0.1), (w * 0.75, h / 2), (w / 2, h * 0.9), (w * 0.25, h / 2)]
    return _wrap(w, h, [f'<polygon id="diamond" points="{_points(pts)}" fill="{_pick(colors, rng)}"/>'])


def _heart(w, h, colors, rng):
    cx, top, bottom, s = w / 2, h * 0.3, h * 0.85, min(w, h) * 0.4
    d = (
        f"M {_fmt(cx)} {_fmt(bottom)} "
        f"C {_fmt(cx - s * 1.2)} {_fmt(h * 0.55)} {_fmt(cx - s)} {_fmt(top - s * 0.4)} {_fmt(cx)} {_fmt(top)} "
        f"C {_fmt(cx + s)} {_fmt(top - s * 0.4)} {_fmt(cx + s * 1.2)} {_fmt(h * 0.55)} {_fmt(cx)} {_fmt(bottom)} Z"
    )
    return _wrap(w, h, [f'<path id="heart" d="{d}" fill="{_pick(colors, rng)}"/>'])


def _wave(w, h, colors, rng):
    amplitude = h * (0.1 + rng.random() * 0.15)
    segments = 4
    step = w * 0.8 / segments
    parts = [f"M {_fmt(w * 0.1)} {_fmt(h / 2)}"]
    for i in range(segments):
        x = w * 0.1 + step * i
        sign = -1 if i % 2 == 0 else 1
        parts.append(f"Q {_fmt(x + step / 2)} {_fmt(h / 2 + sign * amplitude)} {_fmt(x + step)} {_fmt(h / 2)}")
    return _wrap(w, h, [
        f'<path id="wave" d="{" ".join(parts)}" fill="none" stroke="{_pick(colors, rng)}" stroke-width="4"'
        ' stroke-linecap="round"/>'
    ])


def _spiral(w, h, colors, rng):
    turns = 3 + rng.randrange(2)
    max_r = min(w, h) * 0.4
    steps = turns * 12
    pts = []
    for i in range(steps + 1):
        t = i / steps
        angle = t * turns * 2 * math.pi
        pts.append((w / 2 + max_r * t * math.cos(angle), h / 2 + max_r * t * math.sin(angle)))
    return _wrap(w, h, [
        f'<polyline id="spiral" points="{_points(pts)}" fill="none" stroke="{_pick(colors, rng)}" stroke-width="3"/>'
    ])


def _arrow(w, h, colors, rng):
    pts = [
        (w * 0.1, h * 0.4), (w * 0.6, h * 0.4), (w * 0.6, h * 0.25), (w * 0.9, h / 2),
        (w * 0.6, h * 0.75), (w * 0.6, h * 0.6), (w * 0.1, h * 0.6),
    ]
    return _wrap(w, h, [f'<polygon id="arrow" points="{_points(pts)}" fill="{_pick(colors, rng)}"/>'])


def _flower(w, h, colors, rng):
    petal_color = _pick(colors, rng)
    petals = 5 + rng.randrange(3)
    ring = min(w, h) * 0.2
    petal_r = min(w, h) * 0.12
    body = []
    for i in range(petals):
        angle = 2 * math.pi * i / petals
        body.append(
            f'<circle id="petal_{i + 1}" cx="{_fmt(w / 2 + ring * math.cos(angle))}"'
            f' cy="{_fmt(h / 2 + ring * math.sin(angle))}" r="{_fmt(petal_r)}" fill="{petal_color}"/>'
        )
    body.append(f'<circle id="flower_center" cx="{_fmt(w / 2)}" cy="{_fmt(h / 2)}" r="{_fmt(petal_r * 0.8)}" fill="#F59E0B"/>')
    return _wrap(w, h, body)


def _leaf(w, h, colors, rng):
    top, bottom = (w / 2, h * 0.1), (w / 2, h * 0.9)
    bulge = min(w, h) * (0.3 + rng.random() * 0.1)
    d = (
        f"M {_fmt(bottom[0])} {_fmt(bottom[1])} Q {_fmt(w / 2 - bulge)} {_fmt(h / 2)} {_fmt(top[0])} {_fmt(top[1])} "
        f"Q {_fmt(w / 2 + bulge)} {_fmt(h / 2)} {_fmt(bottom[0])} {_fmt(bottom[1])} Z"
    )
    return _wrap(w, h, [
        f'<path id="leaf" d="{d}" fill="{_pick(colors, rng)}"/>',
        f'<line id="leaf_vein" x1="{_fmt(bottom[0])}" y1="{_fmt(bottom[1])}" x2="{_fmt(top[0])}" y2="{_fmt(top[1])}"'
        ' stroke="#14532D" stroke-width="2"/>',
    ])


def _tree(w, h, colors, rng):
    trunk_w = w * 0.1
    crown_r = min(w, h) * (0.25 + rng.random() * 0.05)
    return _wrap(w, h, [
        f'<rect id="trunk" x="{_fmt(w / 2 - trunk_w / 2)}" y="{_fmt(h * 0.55)}" width="{_fmt(trunk_w)}"'
        f' height="{_fmt(h * 0.35)}" fill="#92400E"/>',
        f'<circle id="crown" cx="{_fmt(w / 2)}" cy="{_fmt(h * 0.4)}" r="{_fmt(crown_r)}" fill="{_pick(colors, rng)}"/>',
    ])


def _mandala(w, h, colors, rng):
    cx, cy, base = w / 2, h / 2, min(w, h) * 0.4
    stroke = _pick(colors, rng)
    body = [
        f'<circle id="ring_{i + 1}" cx="{_fmt(cx)}" cy="{_fmt(cy)}" r="{_fmt(base * (1 - i * 0.3))}"'
        f' fill="none" stroke="{stroke}" stroke-width="2"/>'
        for i in range(3)
    ]
    dots = 6 + 2 * rng.randrange(2)
    for i in range(dots):
        angle = 2 * math.pi * i / dots
        body.append(
            f'<circle id="dot_{i + 1}" cx="{_fmt(cx + base * 0.7 * math.cos(angle))}"'
            f' cy="{_fmt(cy + base * 0.7 * math.sin(angle))}" r="{_fmt(base * 0.08)}" fill="{_pick(colors, rng)}"/>'
        )
    return _wrap(w, h, body)


def _pattern(w, h, colors, rng):
    spacing = max(10.0, min(w, h) / 8)
    radius = spacing * 0.2
    color = _pick(colors, rng)
    body = []
    y = spacing / 2
    while y < h:
        x = spacing / 2
        while x < w:
            body.append(f'<circle cx="{_fmt(x)}" cy="{_fmt(y)}" r="{_fmt(radius)}" fill="{color}"/>')
            x += spacing
        y += spacing
    return _wrap(w, h, body)


def _icon(w, h, colors, rng):
    color = _pick(colors, rng)
    roof = [(w / 2, h * 0.15), (w * 0.85, h * 0.45), (w * 0.15, h * 0.45)]
    return _wrap(w, h, [
        f'<polygon id="roof" points="{_points(roof)}" fill="{color}"/>',
        f'<rect id="house" x="{_fmt(w * 0.25)}" y="{_fmt(h * 0.45)}" width="{_fmt(w * 0.5)}"'
        f' height="{_fmt(h * 0.4)}" fill="{color}"/>',
        f'<rect id="door" x="{_fmt(w * 0.45)}" y="{_fmt(h * 0.65)}" width="{_fmt(w * 0.1)}"'
        f' height="{_fmt(h * 0.2)}" fill="none" stroke="#FFFFFF" stroke-width="2"/>',
    ])


LEGACY_TEMPLATES: dict[str, Callable[[float, float, list[str], random.Random], str]] = {
    "triangle": _triangle,
    "hexagon": _polygon_template(6, "hexagon"),
    "pentagon": _polygon_template(5, "pentagon"),
    "octagon": _polygon_template(8, "octagon"),
    "diamond": _diamond,
    "heart": _heart,
    "wave": _wave,
    "spiral": _spiral,
    "arrow": _arrow,
    "flower": _flower,
    "leaf": _leaf,
    "tree": _tree,
    "mandala": _mandala,
    "pattern": _pattern,
    "icon": _icon,
}

# Matched in order; the first template is the default
TEMPLATES: tuple[ShapeTemplate, ...] = (
    ShapeTemplate("circle", ("circle", "round", "ball", "dot", "ring"), ShapeKind.CIRCLE),
    ShapeTemplate("rectangle", ("rectangle", "rect", "square", "box", "card"), ShapeKind.RECT),
    ShapeTemplate("triangle", ("triangle", "point", "peak")),
    ShapeTemplate("star", ("star", "asterisk", "sparkle", "pentagram"), ShapeKind.STAR),
    ShapeTemplate("hexagon", ("hexagon", "hex", "honeycomb")),
    ShapeTemplate("pentagon", ("pentagon", "penta")),
    ShapeTemplate("octagon", ("octagon", "octa", "stop")),
    ShapeTemplate("diamond", ("diamond", "rhombus", "gem", "crystal")),
    ShapeTemplate("heart", ("heart", "love", "valentine")),
    ShapeTemplate("wave", ("wave", "curve", "wavy", "sine")),
    ShapeTemplate("spiral", ("spiral", "swirl", "coil")),
    ShapeTemplate("arrow", ("arrow", "pointer", "direction")),
    ShapeTemplate("flower", ("flower", "blossom", "petal")),
    ShapeTemplate("leaf", ("leaf", "foliage")),
    ShapeTemplate("tree", ("tree", "forest", "oak")),
    ShapeTemplate("mandala", ("mandala", "ornament")),
    ShapeTemplate("pattern", ("pattern", "grid", "lines", "stripes", "dots")),
    ShapeTemplate("icon", ("icon", "symbol", "logo", "badge")),
)


def derive_seed(prompt: str) -> int:
    return int(hashlib.sha256(prompt.encode("utf-8")).hexdigest()[:8], 16)


class RuleBasedGenerator:
    def __init__(self, templates: tuple[ShapeTemplate, ...] = TEMPLATES):
        self.templates = templates

    def select_template(self, prompt: str) -> ShapeTemplate:
        words = prompt.lower()
        for template in self.templates:
            if any(keyword in words for keyword in template.keywords):
                return template
        return self.templates[0]

    @staticmethod
    def resolve_colors(request: GenerationRequest) -> list[str]:
        if request.palette:
            return normalize_palette(request.palette, DEFAULT_PALETTE)
        words = request.prompt.lower().replace(",", " ").split()
        named = [COLOR_WORDS[w] for w in words if w in COLOR_WORDS]
        return named or list(DEFAULT_PALETTE)

    def generate(self, request: GenerationRequest) -> RuleBasedOutput:
        template = self.select_template(request.prompt)
        config = canvas.get_config(request.resolved_aspect_ratio())
        colors = self.resolve_colors(request)
        seed = request.seed if request.seed is not None else derive_seed(request.prompt)

        unified = UNIFIED_GENERATORS.get(template.kind)
        if unified is not None:
            document = unified(config, colors, seed)
        else:
            markup = LEGACY_TEMPLATES[template.name](config.width, config.height, colors, random.Random(seed))
            document = convert_svg_to_document(markup, config.ratio_tag)

        logger.info("Rule-based template %s (%s), seed=%d, %d layers",
                    template.name, template.kind.value, seed, len(document.layers))
        return RuleBasedOutput(document=document, template=template.name, colors=colors, seed=seed)
