"""Shared test fixtures."""

from __future__ import annotations

import copy

import pytest

from unisvg.cache import CacheService
from unisvg.layout.regions import RegionResolver
from unisvg.models.document import UnifiedLayeredDocument
from unisvg.validation.validator import DocumentValidator


# Sample documents in wire (camelCase) form

SIMPLE_DOC = {
    "version": "unified-layered-1.0",
    "canvas": {"width": 512, "height": 512, "aspectRatio": "1:1"},
    "layers": [
        {
            "id": "sun",
            "label": "Sun",
            "layout": {"region": "top_right", "anchor": "center"},
            "paths": [
                {
                    "id": "sun_disc",
                    "style": {"fill": "#FFD700"},
                    "commands": [
                        {"cmd": "M", "coords": [0, 20]},
                        {"cmd": "L", "coords": [20, 0]},
                        {"cmd": "L", "coords": [40, 20]},
                        {"cmd": "L", "coords": [20, 40]},
                        {"cmd": "Z", "coords": []},
                    ],
                }
            ],
        },
        {
            "id": "ground",
            "label": "Ground",
            "paths": [
                {
                    "id": "ground_rect",
                    "style": {"fill": "#228B22", "stroke": "#14532D", "strokeWidth": 2},
                    "commands": [
                        {"cmd": "M", "coords": [0, 400]},
                        {"cmd": "L", "coords": [512, 400]},
                        {"cmd": "L", "coords": [512, 512]},
                        {"cmd": "L", "coords": [0, 512]},
                        {"cmd": "Z", "coords": []},
                    ],
                }
            ],
        },
    ],
}

OUT_OF_RANGE_DOC = {
    "version": "unified-layered-1.0",
    "canvas": {"width": 512, "height": 512, "aspectRatio": "1:1"},
    "layers": [
        {
            "id": "wide",
            "label": "Too wide",
            "paths": [
                {
                    "id": "wide_path",
                    "style": {"fill": "#000000"},
                    "commands": [
                        {"cmd": "M", "coords": [-10, 20]},
                        {"cmd": "L", "coords": [600, 20]},
                        {"cmd": "Q", "coords": [700.456, 300, 256, 900]},
                        {"cmd": "Z", "coords": []},
                    ],
                }
            ],
        }
    ],
}

LEGACY_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="100" height="100" viewBox="0 0 100 100">
  <!-- a comment -->
  <g fill="#FF0000">
    <circle id="dot" cx="50" cy="50" r="10"/>
    <rect x="10" y="10" width="20" height="30" style="fill: blue; stroke: #000"/>
  </g>
  <polygon points="0,0 100,0 50,100" fill="#00ff00"/>
  <path d="M 10 90 L 90 90 Q 95 95 90 99 Z" fill="none" stroke="black" stroke-width="2"/>
  <text x="5" y="5">ignored <tspan>nested</tspan></text>
</svg>'''


def make_document(data: dict | None = None) -> UnifiedLayeredDocument:
    return UnifiedLayeredDocument.model_validate(copy.deepcopy(data or SIMPLE_DOC))


@pytest.fixture
def simple_doc() -> UnifiedLayeredDocument:
    return make_document(SIMPLE_DOC)


@pytest.fixture
def resolver() -> RegionResolver:
    return RegionResolver("1:1")


@pytest.fixture
def validator() -> DocumentValidator:
    return DocumentValidator()


@pytest.fixture
def cache() -> CacheService:
    return CacheService(default_ttl=60)
