"""Axis-aligned rectangles shared by the layout and analysis code."""

from __future__ import annotations

from dataclasses import dataclass

from shapely.geometry import box


@dataclass(frozen=True)
class Bounds:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    @property
    def area(self) -> float:
        return self.width * self.height

    def contains(self, px: float, py: float) -> bool:
        """Inclusive on all four edges."""
        return self.x <= px <= self.right and self.y <= py <= self.bottom

    def intersection_area(self, other: Bounds) -> float:
        return box(self.x, self.y, self.right, self.bottom).intersection(
            box(other.x, other.y, other.right, other.bottom)
        ).area

    def scaled(self, sx: float, sy: float) -> Bounds:
        return Bounds(self.x * sx, self.y * sy, self.width * sx, self.height * sy)

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}
