"""Tests for layout resolution in the coordinate mapper."""

import pytest

from unisvg.layout.coordinate_mapper import CoordinateMapper, LayoutIssue, PositionResult
from unisvg.layout.regions import RegionResolver
from unisvg.models.document import LayoutSpecification, PathCommand


@pytest.fixture
def mapper(resolver):
    return CoordinateMapper(resolver)


def _spec(**kwargs) -> LayoutSpecification:
    return LayoutSpecification.model_validate(kwargs)


class TestCalculatePosition:
    def test_relative_size_centered_box(self, mapper):
        result = mapper.calculate_position(_spec(region="center", anchor="center", size={"relative": 0.6}))
        assert isinstance(result, PositionResult)
        assert result.x == pytest.approx(256)
        assert result.y == pytest.approx(256)
        assert result.width == pytest.approx(0.6 * 174.08)
        cx, cy = result.box.center
        assert cx == pytest.approx(256)
        assert cy == pytest.approx(256)

    def test_defaults_to_canvas_center_region(self, mapper):
        result = mapper.calculate_position(None)
        assert (result.region, result.anchor) == ("center", "center")
        assert result.width is None
        assert result.box is None

    def test_anchor_corners(self, mapper):
        top_left = mapper.calculate_anchor_position("full_canvas", "top_left")
        bottom_right = mapper.calculate_anchor_position("full_canvas", "bottom_right")
        assert (top_left.x, top_left.y) == (0, 0)
        assert (bottom_right.x, bottom_right.y) == (512, 512)

    def test_offset_is_fraction_of_region(self, mapper):
        result = mapper.calculate_position(_spec(region="full_canvas", anchor="center", offset=[0.25, -0.25]))
        assert result.x == pytest.approx(384)
        assert result.y == pytest.approx(128)

    def test_short_offset_ignored(self, mapper):
        result = mapper.calculate_position(_spec(region="center", offset=[0.5]))
        assert result.x == pytest.approx(256)

    def test_position_clamped_to_canvas(self, mapper):
        result = mapper.calculate_position(_spec(region="bottom_right", anchor="bottom_right", offset=[1, 1]))
        assert (result.x, result.y) == (512, 512)

    def test_absolute_and_aspect_sizes(self, mapper):
        absolute = mapper.calculate_position(_spec(size={"absolute": {"width": 40, "height": 20}}))
        assert (absolute.width, absolute.height) == (40, 20)

        constrained = mapper.calculate_position(_spec(size={"aspect_constrained": {"width": 90, "aspect": 1.5}}))
        assert (constrained.width, constrained.height) == (90, 60)

    def test_box_clamped_to_canvas(self, mapper):
        result = mapper.calculate_position(
            _spec(region="top_left", anchor="top_left", size={"absolute": {"width": 100, "height": 100}})
        )
        assert result.box.x == 0
        assert result.box.width == pytest.approx(50)

    def test_unknown_region_is_an_issue(self, mapper):
        result = mapper.calculate_position(_spec(region="moon"))
        assert isinstance(result, LayoutIssue)
        assert result.message == "Unknown region: moon"

    def test_invalid_anchor_is_an_issue(self, mapper):
        result = mapper.calculate_position(_spec(anchor="middle"))
        assert isinstance(result, LayoutIssue)
        assert result.message == "Invalid anchor: middle"

    def test_two_size_variants_rejected(self, mapper):
        result = mapper.calculate_position(
            _spec(size={"relative": 0.5, "absolute": {"width": 10, "height": 10}})
        )
        assert isinstance(result, LayoutIssue)
        assert "at most one" in result.message

    def test_custom_region(self):
        r = RegionResolver("1:1")
        from unisvg.layout.geometry import Bounds

        r.add_custom_region("badge", Bounds(0.75, 0.75, 0.25, 0.25))
        result = CoordinateMapper(r).calculate_position(_spec(region="badge", anchor="top_left"))
        assert (result.x, result.y) == (384, 384)


class TestRepetition:
    def test_grid_positions(self, mapper):
        spec = _spec(region="full_canvas", repeat={"type": "grid", "count": [3, 2], "spacing": 0.1})
        result = mapper.generate_repetition(spec)
        assert len(result.positions) == 6
        xs = sorted({p.x for p in result.positions})
        assert xs == pytest.approx([256 - 51.2, 256, 256 + 51.2])
        ys = sorted({p.y for p in result.positions})
        assert ys == pytest.approx([256 - 25.6, 256 + 25.6])

    @pytest.mark.parametrize("repeat", [
        {"type": "grid", "count": 0},
        {"type": "grid", "count": [3, -1]},
        {"type": "grid", "count": []},
        {"type": "radial", "count": []},
        {"type": "radial", "count": 0},
    ])
    def test_non_positive_counts_are_an_issue(self, mapper, repeat):
        result = mapper.generate_repetition(_spec(repeat=repeat))
        assert isinstance(result, LayoutIssue)
        assert result.message == "Repetition count must be a positive integer"
        assert result.field == "repeat"

    def test_radial_positions(self, mapper):
        spec = _spec(region="full_canvas", repeat={"type": "radial", "count": 4, "radius": 100})
        result = mapper.generate_repetition(spec)
        points = [(round(p.x), round(p.y)) for p in result.positions]
        assert points == [(356, 256), (256, 356), (156, 256), (256, 156)]
        assert result.total_bounds.width == pytest.approx(200)

    def test_no_repeat_single_position(self, mapper):
        result = mapper.generate_repetition(_spec(region="center"))
        assert len(result.positions) == 1


class TestPathCommands:
    def test_translate_to_anchor(self, mapper):
        commands = [PathCommand(cmd="M", coords=[0, 0]), PathCommand(cmd="L", coords=[10, 5]), PathCommand(cmd="Z")]
        out = mapper.transform_path_commands(commands, _spec(region="full_canvas", anchor="top_left", offset=[0.5, 0.5]))
        assert out[0].coords == [256, 256]
        assert out[1].coords == [266, 261]
        assert out[2].cmd == "Z"
        # input untouched
        assert commands[0].coords == [0, 0]

    def test_repeated_copies_start_with_move(self, mapper):
        commands = [PathCommand(cmd="L", coords=[10, 0])]
        spec = _spec(region="full_canvas", repeat={"type": "grid", "count": [2, 1], "spacing": 0.5})
        out = mapper.transform_path_commands(commands, spec)
        assert [c.cmd for c in out] == ["L", "M", "L"]

    def test_bounding_box_skips_close(self, mapper):
        commands = [
            PathCommand(cmd="M", coords=[10, 20]),
            PathCommand(cmd="C", coords=[0, 0, 50, 60, 30, 40]),
            PathCommand(cmd="Z"),
        ]
        box = mapper.calculate_bounding_box(commands)
        assert (box.x, box.y, box.width, box.height) == (0, 0, 50, 60)

    def test_scale_path_to_fit_keeps_aspect(self, mapper):
        commands = [PathCommand(cmd="M", coords=[10, 10]), PathCommand(cmd="L", coords=[30, 20])]
        out = mapper.scale_path_to_fit(commands, 100, 100)
        assert out[0].coords == [0, 0]
        assert out[1].coords == [100, 50]

    def test_round_coordinates(self):
        assert CoordinateMapper.round_coordinates(1.23456, 9.87654) == (1.23, 9.88)
