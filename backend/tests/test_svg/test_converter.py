"""Tests for legacy SVG conversion into unified-layered documents."""

import pytest

from tests.conftest import LEGACY_SVG
from unisvg.svg.converter import convert_svg_to_document, normalize_color


@pytest.mark.parametrize("value,expected", [
    ("#abc", "#AABBCC"),
    ("#00ff00", "#00FF00"),
    ("Blue", "#0000FF"),
    ("transparent", "none"),
    ("url(#grad)", None),
    (None, None),
])
def test_normalize_color(value, expected):
    assert normalize_color(value) == expected


def test_one_layer_per_shape():
    doc = convert_svg_to_document(LEGACY_SVG)
    assert [layer.id for layer in doc.layers] == ["dot", "rect_1", "polygon_1", "path_1"]
    assert [layer.label for layer in doc.layers] == ["Dot", "Rect 1", "Polygon 1", "Path 1"]
    assert all(len(layer.paths) == 1 for layer in doc.layers)
    assert doc.layers[0].paths[0].id == "dot_path"


def test_colors_are_normalized():
    doc = convert_svg_to_document(LEGACY_SVG)
    styles = [layer.paths[0].style for layer in doc.layers]
    assert styles[0].fill == "#FF0000"
    assert (styles[1].fill, styles[1].stroke) == ("#0000FF", "#000000")
    assert styles[2].fill == "#00FF00"
    assert (styles[3].fill, styles[3].stroke, styles[3].stroke_width) == ("none", "#000000", 2.0)


def test_coordinates_are_mapped_to_canvas():
    doc = convert_svg_to_document(LEGACY_SVG)
    circle = doc.layers[0].paths[0].commands
    # cx + r = 60 on a 100 wide viewBox lands at 307.2 on a 512 canvas
    assert circle[0].cmd == "M"
    assert circle[0].coords == [307.2, 256.0]
    assert [c.cmd for c in circle] == ["M", "C", "C", "C", "C", "Z"]


def test_path_data_conversion():
    commands = convert_svg_to_document(LEGACY_SVG).layers[3].paths[0].commands
    assert commands[0].cmd == "M"
    assert "Q" in [c.cmd for c in commands]
    assert commands[-1].cmd == "Z"


def test_other_aspect_ratio():
    doc = convert_svg_to_document(LEGACY_SVG, "16:9")
    assert (doc.canvas.width, doc.canvas.height) == (512, 288)
    ys = [c for layer in doc.layers for cmd in layer.paths[0].commands for c in cmd.coords[1::2]]
    assert max(ys) <= 288


def test_labels_override():
    doc = convert_svg_to_document(LEGACY_SVG, labels={"dot": "Red dot"})
    assert doc.layers[0].label == "Red dot"
