"""Tests for region resolution."""

import pytest

from unisvg.cache import CacheService
from unisvg.errors import InvalidBoundsError, NameConflictError, UnknownRegionError
from unisvg.layout.constants import STANDARD_REGIONS
from unisvg.layout.geometry import Bounds
from unisvg.layout.regions import RegionResolver


def test_standard_regions_inside_unit_square(resolver):
    for name, bounds in resolver.standard_regions().items():
        assert bounds.x >= 0 and bounds.y >= 0, name
        assert bounds.x + bounds.width <= 1.01, name
        assert bounds.y + bounds.height <= 1.01, name


def test_center_pixel_bounds(resolver):
    pixel = resolver.get_pixel_bounds("center")
    assert pixel.x == pytest.approx(168.96)
    assert pixel.y == pytest.approx(168.96)
    assert pixel.width == pytest.approx(174.08)
    assert pixel.height == pytest.approx(174.08)


@pytest.mark.parametrize("x,y", [(0, 0), (0.25, 0.75), (0.5, 0.5), (1, 1), (0.123, 0.987)])
def test_normalized_pixel_round_trip(x, y):
    for ratio in ("1:1", "16:9", "2:3"):
        r = RegionResolver(ratio)
        nx, ny = r.pixel_to_normalized(*r.normalized_to_pixel(x, y))
        assert nx == pytest.approx(x, abs=1e-5)
        assert ny == pytest.approx(y, abs=1e-5)


def test_update_aspect_ratio_only_changes_pixels(resolver):
    normalized = {name: resolver.get_region_bounds(name) for name in STANDARD_REGIONS}
    square_pixels = resolver.get_pixel_bounds("top_left")

    resolver.update_aspect_ratio("16:9")

    assert {name: resolver.get_region_bounds(name) for name in STANDARD_REGIONS} == normalized
    wide_pixels = resolver.get_pixel_bounds("top_left")
    assert wide_pixels.height == pytest.approx(0.33 * 288)
    assert wide_pixels != square_pixels


def test_unknown_region(resolver):
    with pytest.raises(UnknownRegionError) as exc_info:
        resolver.get_region_bounds("nowhere")
    assert str(exc_info.value) == "Unknown region: nowhere"
    assert not resolver.has_region("nowhere")


class TestCustomRegions:
    def test_add_and_remove(self, resolver):
        resolver.add_custom_region("sidebar", Bounds(0.8, 0, 0.2, 1), "Right sidebar")
        assert resolver.has_region("sidebar")
        assert resolver.is_custom("sidebar")
        assert resolver.get_region_info("sidebar").description == "Right sidebar"
        assert resolver.get_pixel_bounds("sidebar").width == pytest.approx(102.4)

        assert resolver.remove_custom_region("sidebar") is True
        assert resolver.remove_custom_region("sidebar") is False
        assert not resolver.has_region("sidebar")

    def test_cannot_override_standard(self, resolver):
        with pytest.raises(NameConflictError, match="Cannot override standard region 'center'"):
            resolver.add_custom_region("center", Bounds(0, 0, 0.5, 0.5))
        with pytest.raises(NameConflictError, match="Cannot remove standard region 'center'"):
            resolver.remove_custom_region("center")

    @pytest.mark.parametrize("bounds", [
        Bounds(-0.1, 0, 0.5, 0.5),
        Bounds(0.6, 0, 0.5, 0.5),
        Bounds(0, 0, 0, 0.5),
        Bounds(0, 0, 1.5, 0.5),
    ])
    def test_invalid_bounds(self, resolver, bounds):
        with pytest.raises(InvalidBoundsError, match="bounds must be within \\[0,1\\] range"):
            resolver.add_custom_region("bad", bounds)

    def test_epsilon_tolerance(self, resolver):
        resolver.add_custom_region("edge", Bounds(0.5, 0.5, 0.505, 0.505))
        assert resolver.has_region("edge")

    def test_custom_regions_are_per_instance(self, resolver):
        resolver.add_custom_region("banner", Bounds(0, 0, 1, 0.2))
        assert not RegionResolver("1:1").has_region("banner")

    def test_constructor_regions(self):
        r = RegionResolver("4:3", custom_regions={"footer": Bounds(0, 0.9, 1, 0.1)})
        assert r.get_region_bounds("footer") == Bounds(0, 0.9, 1, 0.1)


class TestSpatialQueries:
    def test_find_region_at_point(self, resolver):
        assert resolver.find_region_at_point(0.5, 0.5) == "center"
        assert resolver.find_region_at_point(0.1, 0.1) == "top_left"
        assert resolver.find_region_at_point(0.9, 0.9) == "bottom_right"
        assert resolver.find_region_at_pixel_point(500, 10) == "top_right"

    def test_custom_region_wins_at_point(self, resolver):
        resolver.add_custom_region("logo", Bounds(0.4, 0.4, 0.2, 0.2))
        assert resolver.find_region_at_point(0.5, 0.5) == "logo"

    def test_point_outside_canvas(self, resolver):
        assert resolver.find_region_at_point(1.5, 0.5) is None

    def test_overlap(self, resolver):
        assert resolver.calculate_region_overlap("center", "full_canvas") == pytest.approx(0.34 * 0.34)
        assert resolver.calculate_region_overlap("top_left", "top_center") == pytest.approx(0.0)
        assert resolver.calculate_region_overlap("top_left", "bottom_right") == 0

    def test_regions_by_distance(self, resolver):
        ranked = resolver.get_regions_by_distance(0.5, 0.5)
        assert {ranked[0][0], ranked[1][0]} == {"center", "full_canvas"}
        distances = [d for _, d in ranked]
        assert distances == sorted(distances)
        assert len(ranked) == len(STANDARD_REGIONS)

    def test_region_center_pixels(self, resolver):
        cx, cy = resolver.get_region_center_pixels("center")
        assert cx == pytest.approx(256)
        assert cy == pytest.approx(256)


def test_clamp_and_validate(resolver):
    assert resolver.clamp_normalized(-1, 2) == (0.0, 1.0)
    assert resolver.clamp_pixel(-5, 900) == (0.0, 512)
    assert resolver.validate_normalized_coordinates(0.5, 1)
    assert not resolver.validate_normalized_coordinates(1.01, 0)
    assert resolver.validate_pixel_coordinates(512, 0)
    assert not resolver.validate_pixel_coordinates(513, 0)


def test_pixel_bounds_use_cache():
    cache = CacheService()
    r = RegionResolver("1:1", cache=cache)
    first = r.get_pixel_bounds("center")
    second = r.get_pixel_bounds("center")
    assert first == second
    assert cache.stats()["hits"] == 1

    r.update_aspect_ratio("16:9")
    assert r.get_pixel_bounds("center").height == pytest.approx(0.34 * 288)
