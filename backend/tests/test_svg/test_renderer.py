"""Tests for rendering unified-layered documents to SVG markup."""

from tests.conftest import make_document
from unisvg.models.document import DocumentLayout, LayoutSpecification
from unisvg.svg.renderer import DocumentRenderer, build_path_data, format_number, render_document


def test_format_number():
    assert format_number(12.0) == "12"
    assert format_number(3.14159) == "3.14"


def test_one_group_per_layer(simple_doc):
    svg = render_document(simple_doc)
    assert svg.startswith('<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 512 512" width="512" height="512">')
    assert svg.endswith("</svg>")
    assert svg.count("<g ") == 2
    assert "<!-- Layer: Sun -->" in svg
    assert '<g id="sun" data-label="Sun" data-region="top_right" data-anchor="center">' in svg


def test_layer_without_layout_keeps_coordinates(simple_doc):
    svg = render_document(simple_doc)
    assert 'd="M 0 400 L 512 400 L 512 512 L 0 512 Z"' in svg
    assert 'fill="#228B22" stroke="#14532D" stroke-width="2"' in svg


def test_layout_translates_to_anchor(simple_doc):
    svg = render_document(simple_doc)
    # top_right region center is (427.52, 84.48)
    assert 'd="M 427.52 104.48 L 447.52 84.48' in svg


def test_default_layout_is_absolute(simple_doc):
    simple_doc.layers[0].layout = LayoutSpecification(region="center", anchor="center")
    svg = render_document(simple_doc)
    assert 'd="M 0 20 L 20 0 L 40 20 L 20 40 Z"' in svg


def _path_line(svg: str, path_id: str) -> str:
    return next(line.strip() for line in svg.splitlines() if f'<path id="{path_id}"' in line)


def test_global_layout_applies_to_layers_without_layout():
    inherited = make_document()
    inherited.layout = DocumentLayout(global_anchor="top_left", global_offset=[0.1, 0])
    explicit = make_document()
    explicit.layers[1].layout = LayoutSpecification(anchor="top_left", offset=[0.1, 0])

    line = _path_line(render_document(inherited), "ground_rect")
    assert line == _path_line(render_document(explicit), "ground_rect")
    assert 'd="M 0 400 L 512 400' not in line


def test_empty_global_layout_keeps_coordinates(simple_doc):
    simple_doc.layout = DocumentLayout()
    svg = render_document(simple_doc)
    assert 'd="M 0 400 L 512 400 L 512 512 L 0 512 Z"' in svg


def test_display_size(simple_doc):
    svg = DocumentRenderer(display_width=1024, display_height=1024).render(simple_doc)
    assert 'width="1024" height="1024"' in svg
    assert 'viewBox="0 0 512 512"' in svg


def test_unknown_region_keeps_raw_commands():
    doc = make_document()
    doc.layers[0].layout = LayoutSpecification(region="nowhere")
    svg = render_document(doc)
    assert 'd="M 0 20 L 20 0 L 40 20 L 20 40 Z"' in svg


def test_path_data():
    doc = make_document()
    assert build_path_data(doc.layers[1].paths[0].commands) == "M 0 400 L 512 400 L 512 512 L 0 512 Z"
