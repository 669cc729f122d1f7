"""Fixed tables of the unified-layered coordinate system.

Every document is authored on a canonical canvas whose longest side is 512.
Regions are normalized rectangles over the unit square and anchors are
normalized points inside a region's bounding box; both are independent of
the canvas aspect ratio.
"""

SCHEMA_VERSION = "unified-layered-1.0"

# Canonical coordinate space
COORDINATE_MIN = 0
COORDINATE_MAX = 512
COORDINATE_PRECISION = 2

# Tolerance for region bounds (x + width may reach 1 + REGION_EPSILON)
REGION_EPSILON = 0.01

# (x, y, width, height), normalized
REGION_BOUNDS: dict[str, tuple[float, float, float, float]] = {
    "top_left": (0.0, 0.0, 0.33, 0.33),
    "top_center": (0.33, 0.0, 0.34, 0.33),
    "top_right": (0.67, 0.0, 0.33, 0.33),
    "middle_left": (0.0, 0.33, 0.33, 0.34),
    "center": (0.33, 0.33, 0.34, 0.34),
    "middle_right": (0.67, 0.33, 0.33, 0.34),
    "bottom_left": (0.0, 0.67, 0.33, 0.33),
    "bottom_center": (0.33, 0.67, 0.34, 0.33),
    "bottom_right": (0.67, 0.67, 0.33, 0.33),
    "full_canvas": (0.0, 0.0, 1.0, 1.0),
}

STANDARD_REGIONS = frozenset(REGION_BOUNDS)

REGION_DESCRIPTIONS: dict[str, str] = {
    "top_left": "Upper left corner",
    "top_center": "Upper middle band",
    "top_right": "Upper right corner",
    "middle_left": "Left side, vertically centered",
    "center": "Middle of the canvas",
    "middle_right": "Right side, vertically centered",
    "bottom_left": "Lower left corner",
    "bottom_center": "Lower middle band",
    "bottom_right": "Lower right corner",
    "full_canvas": "Entire canvas",
}

# (x, y) offset inside a region's box
ANCHOR_OFFSETS: dict[str, tuple[float, float]] = {
    "center": (0.5, 0.5),
    "top_left": (0.0, 0.0),
    "top_right": (1.0, 0.0),
    "bottom_left": (0.0, 1.0),
    "bottom_right": (1.0, 1.0),
    "top_center": (0.5, 0.0),
    "bottom_center": (0.5, 1.0),
    "middle_left": (0.0, 0.5),
    "middle_right": (1.0, 0.5),
}

DEFAULT_REGION = "center"
DEFAULT_ANCHOR = "center"

# Path command tag -> number of coordinates
COMMAND_ARITY: dict[str, int] = {"M": 2, "L": 2, "C": 6, "Q": 4, "Z": 0}
