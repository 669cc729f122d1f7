"""Named placement regions over the unit square, resolved to canvas pixels."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from unisvg.cache import CacheService, make_key
from unisvg.errors import InvalidBoundsError, NameConflictError, UnknownRegionError
from unisvg.layout import canvas
from unisvg.layout.constants import (
    REGION_BOUNDS,
    REGION_DESCRIPTIONS,
    REGION_EPSILON,
    STANDARD_REGIONS,
)
from unisvg.layout.geometry import Bounds

logger = logging.getLogger(__name__)

_STANDARD: dict[str, Bounds] = {name: Bounds(*b) for name, b in REGION_BOUNDS.items()}


@dataclass(frozen=True)
class RegionInfo:
    name: str
    bounds: Bounds
    pixel_bounds: Bounds
    is_custom: bool
    description: str = ""


def is_valid_bounds(bounds: Bounds) -> bool:
    return (
        0 <= bounds.x <= 1
        and 0 <= bounds.y <= 1
        and 0 < bounds.width <= 1
        and 0 < bounds.height <= 1
        and bounds.right <= 1 + REGION_EPSILON
        and bounds.bottom <= 1 + REGION_EPSILON
    )


class RegionResolver:
    """Standard regions plus per-instance custom regions for one canvas.

    Normalized bounds never depend on the aspect ratio; only pixel bounds do.
    """

    def __init__(
        self,
        aspect_ratio: str = canvas.DEFAULT_RATIO,
        custom_regions: dict[str, Bounds] | None = None,
        cache: CacheService | None = None,
    ):
        self._canvas = canvas.get_config(aspect_ratio)
        self._custom: dict[str, Bounds] = {}
        self._descriptions: dict[str, str] = {}
        self._cache = cache
        for name, bounds in (custom_regions or {}).items():
            self.add_custom_region(name, bounds)

    # -- canvas ---------------------------------------------------------

    @property
    def aspect_ratio(self) -> str:
        return self._canvas.ratio_tag

    @property
    def canvas_width(self) -> int:
        return self._canvas.width

    @property
    def canvas_height(self) -> int:
        return self._canvas.height

    def update_aspect_ratio(self, aspect_ratio: str) -> None:
        """Switch canvas; normalized region bounds are untouched."""
        self._canvas = canvas.get_config(aspect_ratio)

    # -- lookup ---------------------------------------------------------

    def has_region(self, name: str) -> bool:
        return name in self._custom or name in _STANDARD

    is_valid_region = has_region

    def is_custom(self, name: str) -> bool:
        return name in self._custom

    def get_region_bounds(self, name: str) -> Bounds:
        if name in self._custom:
            return self._custom[name]
        if name in _STANDARD:
            return _STANDARD[name]
        raise UnknownRegionError(name)

    def get_pixel_bounds(self, name: str) -> Bounds:
        bounds = self.get_region_bounds(name)
        if self._cache is None:
            return bounds.scaled(self.canvas_width, self.canvas_height)

        key = make_key("region", self.aspect_ratio, name, bounds.to_dict())
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        pixel = bounds.scaled(self.canvas_width, self.canvas_height)
        self._cache.set(key, pixel)
        return pixel

    def get_region_info(self, name: str) -> RegionInfo:
        return RegionInfo(
            name=name,
            bounds=self.get_region_bounds(name),
            pixel_bounds=self.get_pixel_bounds(name),
            is_custom=self.is_custom(name),
            description=self._descriptions.get(name, REGION_DESCRIPTIONS.get(name, "")),
        )

    def standard_regions(self) -> dict[str, Bounds]:
        return dict(_STANDARD)

    def custom_regions(self) -> dict[str, Bounds]:
        return dict(self._custom)

    def get_all_regions(self) -> dict[str, Bounds]:
        return {**_STANDARD, **self._custom}

    # -- custom regions -------------------------------------------------

    def add_custom_region(self, name: str, bounds: Bounds, description: str = "") -> None:
        if not name:
            raise InvalidBoundsError("Region name must not be empty")
        if name in STANDARD_REGIONS:
            raise NameConflictError(f"Cannot override standard region '{name}'")
        if not is_valid_bounds(bounds):
            raise InvalidBoundsError(
                f"Invalid region bounds for '{name}': bounds must be within [0,1] range"
            )
        self._custom[name] = bounds
        if description:
            self._descriptions[name] = description
        logger.debug("Registered custom region %s %s", name, bounds)

    def remove_custom_region(self, name: str) -> bool:
        if name in STANDARD_REGIONS:
            raise NameConflictError(f"Cannot remove standard region '{name}'")
        self._descriptions.pop(name, None)
        return self._custom.pop(name, None) is not None

    # -- spatial queries ------------------------------------------------

    def get_region_center(self, name: str) -> tuple[float, float]:
        return self.get_region_bounds(name).center

    def get_region_center_pixels(self, name: str) -> tuple[float, float]:
        return self.get_pixel_bounds(name).center

    def find_region_at_point(self, x: float, y: float) -> str | None:
        """First region containing a normalized point, custom regions first."""
        for name, bounds in self._custom.items():
            if bounds.contains(x, y):
                return name
        for name, bounds in _STANDARD.items():
            if bounds.contains(x, y):
                return name
        return None

    def find_region_at_pixel_point(self, px: float, py: float) -> str | None:
        return self.find_region_at_point(*self.pixel_to_normalized(px, py))

    def calculate_region_overlap(self, first: str, second: str) -> float:
        """Intersection area in unit-square units. Shared edges overlap by 0."""
        return self.get_region_bounds(first).intersection_area(self.get_region_bounds(second))

    def get_regions_by_distance(self, x: float, y: float) -> list[tuple[str, float]]:
        """All regions ordered by distance from their center to a normalized point."""
        distances = [
            (name, math.hypot(bounds.center[0] - x, bounds.center[1] - y))
            for name, bounds in self.get_all_regions().items()
        ]
        return sorted(distances, key=lambda item: item[1])

    # -- coordinate conversion ------------------------------------------

    def normalized_to_pixel(self, x: float, y: float) -> tuple[float, float]:
        return (x * self.canvas_width, y * self.canvas_height)

    def pixel_to_normalized(self, px: float, py: float) -> tuple[float, float]:
        return (px / self.canvas_width, py / self.canvas_height)

    @staticmethod
    def clamp_normalized(x: float, y: float) -> tuple[float, float]:
        return (max(0.0, min(1.0, x)), max(0.0, min(1.0, y)))

    def clamp_pixel(self, px: float, py: float) -> tuple[float, float]:
        return canvas.clamp_coordinates(px, py, self.aspect_ratio)

    @staticmethod
    def validate_normalized_coordinates(x: float, y: float) -> bool:
        return 0 <= x <= 1 and 0 <= y <= 1

    def validate_pixel_coordinates(self, px: float, py: float) -> bool:
        return canvas.validate_coordinates(px, py, self.aspect_ratio)
