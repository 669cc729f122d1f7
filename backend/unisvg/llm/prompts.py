"""Prompt text for the upstream document generator."""

from __future__ import annotations

from unisvg.layout.constants import ANCHOR_OFFSETS, REGION_DESCRIPTIONS, SCHEMA_VERSION

_REGION_LINES = "\n".join(f"- {name}: {text}" for name, text in REGION_DESCRIPTIONS.items())

_GENERATOR_TEMPLATE = """You are an SVG illustrator that writes unified-layered documents as JSON.

OUTPUT FORMAT: return ONLY a JSON object, no prose and no markdown fences:
{{
  "version": "{version}",
  "canvas": {{"width": {width}, "height": {height}, "aspectRatio": "{aspect_ratio}"}},
  "layers": [
    {{
      "id": "snake_case_id",
      "label": "Human readable label",
      "layout": {{"region": "center", "anchor": "center"}},
      "paths": [
        {{
          "id": "unique_path_id",
          "style": {{"fill": "#RRGGBB", "stroke": "#RRGGBB", "strokeWidth": 2}},
          "commands": [{{"cmd": "M", "coords": [x, y]}}, {{"cmd": "L", "coords": [x, y]}}, {{"cmd": "Z", "coords": []}}]
        }}
      ]
    }}
  ]
}}

RULES:
1. Commands are absolute: M and L take 2 coordinates, Q takes 4, C takes 6, Z takes none.
2. Every path starts with M. Coordinates stay within 0..{width} horizontally and 0..{height} vertically.
3. Colors are #RRGGBB or "none".
4. At most 10 layers, 20 paths per layer and 50 commands per path.
5. Layer and path ids are unique and non-empty; every layer has a descriptive label.
6. When a layout moves content away from the canvas center, path coordinates are relative to the anchor point.

REGIONS:
{regions}

ANCHORS: {anchors}"""

_FEEDBACK_TEMPLATE = """Your previous document was rejected. Fix these problems:
{feedback}"""


def build_system_prompt(width: int, height: int, aspect_ratio: str) -> str:
    return _GENERATOR_TEMPLATE.format(
        version=SCHEMA_VERSION,
        width=width,
        height=height,
        aspect_ratio=aspect_ratio,
        regions=_REGION_LINES,
        anchors=", ".join(ANCHOR_OFFSETS),
    )


def build_user_prompt(prompt: str, palette: list[str] | None, feedback: list[str] | None) -> str:
    parts = [f"Draw: {prompt}"]
    if palette:
        parts.append("Use this palette: " + ", ".join(palette))
    if feedback:
        parts.append(_FEEDBACK_TEMPLATE.format(feedback="\n".join(feedback)))
    return "\n\n".join(parts)
