"""Last-resort artifacts: a keyword-picked basic shape, or a failure placeholder.

Neither response touches the network, the validator or the cache.
"""

from __future__ import annotations

from unisvg.layout.canvas import CanvasConfig
from unisvg.models.responses import GenerationMeta, GenerationResponse, LayerInfo
from unisvg.svg.converter import normalize_palette
from unisvg.svg.renderer import format_number as _n

BASIC_PALETTE = ["#3B82F6", "#1E40AF", "#1D4ED8"]
FAILURE_PALETTE = ["#DC2626", "#7F1D1D"]


def _svg_open(config: CanvasConfig) -> str:
    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="{config.view_box}"'
        f' width="{config.width}" height="{config.height}">'
    )


def basic_shape_markup(prompt: str, config: CanvasConfig, palette: list[str]) -> str:
    w, h = config.width, config.height
    palette = normalize_palette(palette, BASIC_PALETTE)
    fill, stroke = palette[0], palette[1 % len(palette)]
    paint = f'fill="{fill}" stroke="{stroke}" stroke-width="2"'
    words = prompt.lower()

    circle = f'<circle cx="{_n(w / 2)}" cy="{_n(h / 2)}" r="{_n(min(w, h) * 0.3)}" {paint}/>'
    if "circle" in words or "round" in words:
        shape = circle
    elif "square" in words or "rectangle" in words:
        shape = (
            f'<rect x="{_n(w * 0.2)}" y="{_n(h * 0.2)}" width="{_n(w * 0.6)}" height="{_n(h * 0.6)}" {paint}/>'
        )
    elif "triangle" in words:
        points = f"{_n(w / 2)},{_n(h * 0.2)} {_n(w * 0.2)},{_n(h * 0.8)} {_n(w * 0.8)},{_n(h * 0.8)}"
        shape = f'<polygon points="{points}" {paint}/>'
    else:
        shape = circle
    return "\n".join([_svg_open(config), '  <g id="basic_shape">', f"    {shape}", "  </g>", "</svg>"])


def basic_shapes_response(
    prompt: str,
    config: CanvasConfig,
    palette: list[str] | None = None,
    seed: int | None = None,
    warnings: list[str] | None = None,
) -> GenerationResponse:
    colors = normalize_palette(palette, BASIC_PALETTE)
    return GenerationResponse(
        svg=basic_shape_markup(prompt, config, colors),
        meta=GenerationMeta(
            width=config.width,
            height=config.height,
            view_box=config.view_box,
            palette=colors,
            description=f'Basic shape fallback for: "{prompt}"',
            seed=seed,
        ),
        layers=[LayerInfo(id="basic_shape", label="Basic Shape", type="shape")],
        warnings=["Used basic shapes fallback due to generation failures", *(warnings or [])],
        errors=["All advanced generation methods failed. Using basic shapes fallback."],
        method="basic-shapes",
    )


def failure_markup(config: CanvasConfig) -> str:
    w, h = config.width, config.height
    return "\n".join([
        _svg_open(config),
        f'  <rect width="{w}" height="{h}" fill="#FEF2F2" stroke="#DC2626" stroke-width="2"/>',
        f'  <text x="{_n(w / 2)}" y="{_n(h / 2 - 10)}" text-anchor="middle" font-family="Arial, sans-serif"'
        ' font-size="16" font-weight="bold" fill="#DC2626">Generation Failed</text>',
        f'  <text x="{_n(w / 2)}" y="{_n(h / 2 + 15)}" text-anchor="middle" font-family="Arial, sans-serif"'
        ' font-size="12" fill="#7F1D1D">All generation methods failed</text>',
        "</svg>",
    ])


def failure_response(
    prompt: str,
    config: CanvasConfig,
    message: str,
    seed: int | None = None,
    recent_errors: list[str] | None = None,
) -> GenerationResponse:
    return GenerationResponse(
        svg=failure_markup(config),
        meta=GenerationMeta(
            width=config.width,
            height=config.height,
            view_box=config.view_box,
            palette=list(FAILURE_PALETTE),
            description=f'Complete generation failure for: "{prompt}"',
            seed=seed,
        ),
        layers=[],
        warnings=[],
        errors=["All generation methods failed", message, *(recent_errors or [])],
        method="failed",
    )
