"""Canvas registry: aspect-ratio tags mapped to fixed canonical canvases.

Layout math always runs on the canonical canvas (longest side 512). Display
size is a separate linear scale applied by the caller, see scale_coordinates.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass

from unisvg.errors import UnsupportedAspectRatio

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CanvasConfig:
    ratio_tag: str
    ratio: float
    name: str
    width: int
    height: int
    common_sizes: tuple[tuple[int, int], ...] = ()

    @property
    def view_box(self) -> str:
        return f"0 0 {self.width} {self.height}"


@dataclass(frozen=True)
class CanvasDimensions:
    width: float
    height: float
    view_box: str
    aspect_ratio: str


_CONFIGS: dict[str, CanvasConfig] = {
    "1:1": CanvasConfig("1:1", 1.0, "Square", 512, 512,
                        ((256, 256), (512, 512), (1024, 1024))),
    "4:3": CanvasConfig("4:3", 4 / 3, "Traditional", 512, 384,
                        ((320, 240), (640, 480), (1024, 768))),
    "16:9": CanvasConfig("16:9", 16 / 9, "Widescreen", 512, 288,
                         ((320, 180), (640, 360), (1280, 720))),
    "3:2": CanvasConfig("3:2", 3 / 2, "Photo", 512, 341,
                        ((300, 200), (600, 400), (1200, 800))),
    "2:3": CanvasConfig("2:3", 2 / 3, "Portrait", 341, 512,
                        ((200, 300), (400, 600), (800, 1200))),
    "9:16": CanvasConfig("9:16", 9 / 16, "Mobile Portrait", 288, 512,
                         ((180, 320), (360, 640), (720, 1280))),
}

DEFAULT_RATIO = "1:1"


def get_config(ratio: str) -> CanvasConfig:
    """Return a copy of the canonical config for a ratio tag."""
    config = _CONFIGS.get(ratio)
    if config is None:
        raise UnsupportedAspectRatio(ratio)
    return dataclasses.replace(config)


def is_valid_ratio(ratio: str) -> bool:
    return ratio in _CONFIGS


def supported_ratios() -> list[str]:
    return list(_CONFIGS)


def default_ratio() -> str:
    return DEFAULT_RATIO


def get_canvas_dimensions(ratio: str) -> CanvasDimensions:
    config = get_config(ratio)
    return CanvasDimensions(config.width, config.height, config.view_box, ratio)


def calculate_dimensions(ratio: str, target_width: float) -> CanvasDimensions:
    """Display dimensions for a target width; the viewBox stays canonical."""
    config = get_config(ratio)
    height = round(target_width / config.ratio)
    return CanvasDimensions(target_width, height, config.view_box, ratio)


def calculate_dimensions_by_height(ratio: str, target_height: float) -> CanvasDimensions:
    config = get_config(ratio)
    width = round(target_height * config.ratio)
    return CanvasDimensions(width, target_height, config.view_box, ratio)


def get_view_box(ratio: str, width: float | None = None, height: float | None = None) -> str:
    config = get_config(ratio)
    if width and height:
        target = width / height
        if abs(target - config.ratio) > 0.01:
            logger.warning(
                "Dimension ratio %.2f doesn't match aspect ratio %.2f", target, config.ratio
            )
    return config.view_box


def get_closest_ratio(width: float, height: float) -> str:
    """Ratio tag minimizing |ratio - width/height|; ties go to table order."""
    target = width / height
    closest = DEFAULT_RATIO
    min_diff = float("inf")
    for tag, config in _CONFIGS.items():
        diff = abs(config.ratio - target)
        if diff < min_diff:
            min_diff = diff
            closest = tag
    return closest


def validate_coordinates(x: float, y: float, ratio: str) -> bool:
    config = get_config(ratio)
    return 0 <= x <= config.width and 0 <= y <= config.height


def clamp_coordinates(x: float, y: float, ratio: str) -> tuple[float, float]:
    config = get_config(ratio)
    return (max(0.0, min(config.width, x)), max(0.0, min(config.height, y)))


def scale_coordinates(
    x: float, y: float, from_ratio: str, to_width: float, to_height: float
) -> tuple[float, float]:
    """Canonical coordinates -> display coordinates."""
    config = get_config(from_ratio)
    return (x / config.width * to_width, y / config.height * to_height)


def normalize_coordinates(
    x: float, y: float, from_width: float, from_height: float, to_ratio: str
) -> tuple[float, float]:
    """Coordinates on an arbitrary canvas -> canonical coordinates."""
    config = get_config(to_ratio)
    return (x / from_width * config.width, y / from_height * config.height)
