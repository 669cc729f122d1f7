"""Resolve layout specifications (region, anchor, offset, size, repeat) to pixels."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

import numpy as np

from unisvg.errors import UnknownRegionError
from unisvg.layout.constants import (
    ANCHOR_OFFSETS,
    COORDINATE_PRECISION,
    DEFAULT_ANCHOR,
    DEFAULT_REGION,
)
from unisvg.layout.geometry import Bounds
from unisvg.layout.regions import RegionResolver
from unisvg.models.document import LayoutSpecification, PathCommand, SizeSpec

logger = logging.getLogger(__name__)

DEFAULT_GRID_SPACING = 0.1
DEFAULT_RADIAL_RADIUS = 50.0


@dataclass(frozen=True)
class PositionResult:
    """Anchor point after offset, plus the resolved size when one was given."""

    x: float
    y: float
    width: float | None = None
    height: float | None = None
    region: str = DEFAULT_REGION
    anchor: str = DEFAULT_ANCHOR
    box: Bounds | None = None


@dataclass(frozen=True)
class LayoutIssue:
    message: str
    field: str = "layout"


@dataclass(frozen=True)
class RepetitionResult:
    positions: list[PositionResult] = field(default_factory=list)
    total_bounds: Bounds = Bounds(0, 0, 0, 0)


class CoordinateMapper:
    """Maps layout specifications onto the resolver's canonical canvas.

    Every public method that takes a layout returns a LayoutIssue instead of
    raising when the layout references something that does not exist.
    """

    def __init__(self, resolver: RegionResolver):
        self.resolver = resolver

    @property
    def canvas_width(self) -> int:
        return self.resolver.canvas_width

    @property
    def canvas_height(self) -> int:
        return self.resolver.canvas_height

    def clamp_x(self, x: float) -> float:
        return max(0.0, min(float(self.canvas_width), x))

    def clamp_y(self, y: float) -> float:
        return max(0.0, min(float(self.canvas_height), y))

    # -- position ---------------------------------------------------------

    def calculate_position(self, spec: LayoutSpecification | None) -> PositionResult | LayoutIssue:
        spec = spec or LayoutSpecification()
        region = spec.region or DEFAULT_REGION
        anchor = spec.anchor or DEFAULT_ANCHOR

        try:
            pixel = self.resolver.get_pixel_bounds(region)
        except UnknownRegionError:
            return LayoutIssue(f"Unknown region: {region}", "region")
        if anchor not in ANCHOR_OFFSETS:
            return LayoutIssue(f"Invalid anchor: {anchor}", "anchor")

        ax, ay = ANCHOR_OFFSETS[anchor]
        offset = spec.offset if spec.offset and len(spec.offset) >= 2 else [0.0, 0.0]
        ox, oy = offset[0], offset[1]
        x = pixel.x + ax * pixel.width + ox * pixel.width
        y = pixel.y + ay * pixel.height + oy * pixel.height

        width = height = None
        box = None
        if spec.size is not None and spec.size.variants_set():
            size = self.calculate_size(spec.size, pixel)
            if isinstance(size, LayoutIssue):
                return size
            width, height = size
            box = self._clamp_box(x - width / 2, y - height / 2, width, height)

        return PositionResult(
            x=self.clamp_x(x),
            y=self.clamp_y(y),
            width=width,
            height=height,
            region=region,
            anchor=anchor,
            box=box,
        )

    def calculate_size(self, size: SizeSpec, pixel: Bounds) -> tuple[float, float] | LayoutIssue:
        """Width/height for a size spec inside a region's pixel bounds."""
        variants = size.variants_set()
        if len(variants) > 1:
            return LayoutIssue(
                "Size specification must set at most one of absolute, relative, aspect_constrained",
                "size",
            )
        if size.absolute is not None:
            return (size.absolute.width, size.absolute.height)
        if size.relative is not None:
            side = size.relative * min(pixel.width, pixel.height)
            return (side, side)
        if size.aspect_constrained is not None:
            constrained = size.aspect_constrained
            if constrained.aspect <= 0:
                return LayoutIssue(f"Invalid aspect: {constrained.aspect}", "size")
            return (constrained.width, constrained.width / constrained.aspect)
        # no variant: 10% of the region
        return (pixel.width * 0.1, pixel.height * 0.1)

    def calculate_anchor_position(self, region: str, anchor: str) -> PositionResult | LayoutIssue:
        return self.calculate_position(LayoutSpecification(region=region, anchor=anchor))

    def calculate_offset_position(
        self, base: PositionResult, offset: tuple[float, float], region: str
    ) -> PositionResult | LayoutIssue:
        try:
            pixel = self.resolver.get_pixel_bounds(region)
        except UnknownRegionError:
            return LayoutIssue(f"Unknown region: {region}", "region")
        return PositionResult(
            x=self.clamp_x(base.x + offset[0] * pixel.width),
            y=self.clamp_y(base.y + offset[1] * pixel.height),
            width=base.width,
            height=base.height,
            region=region,
            anchor=base.anchor,
        )

    def _clamp_box(self, x: float, y: float, width: float, height: float) -> Bounds:
        left, top = self.clamp_x(x), self.clamp_y(y)
        right, bottom = self.clamp_x(x + width), self.clamp_y(y + height)
        return Bounds(left, top, right - left, bottom - top)

    # -- repetition -------------------------------------------------------

    def generate_repetition(
        self, spec: LayoutSpecification, base: PositionResult | None = None
    ) -> RepetitionResult | LayoutIssue:
        if base is None:
            resolved = self.calculate_position(spec)
            if isinstance(resolved, LayoutIssue):
                return resolved
            base = resolved

        repeat = spec.repeat
        if repeat is None or repeat.type not in ("grid", "radial"):
            return RepetitionResult(
                positions=[base],
                total_bounds=Bounds(base.x, base.y, base.width or 0, base.height or 0),
            )
        counts = repeat.count if isinstance(repeat.count, list) else [repeat.count]
        if not counts or any(count <= 0 for count in counts):
            return LayoutIssue("Repetition count must be a positive integer", "repeat")
        if repeat.type == "grid":
            return self._grid(spec, base)
        return self._radial(spec, base)

    def _grid(self, spec: LayoutSpecification, base: PositionResult) -> RepetitionResult:
        repeat = spec.repeat
        if isinstance(repeat.count, list):
            count_x, count_y = (list(repeat.count) + [1, 1])[:2]
        else:
            count_x = count_y = repeat.count

        spacing = repeat.spacing or DEFAULT_GRID_SPACING
        pixel = self.resolver.get_pixel_bounds(base.region)
        step_x = spacing * pixel.width
        step_y = spacing * pixel.height
        total_w = (count_x - 1) * step_x + (base.width or 0)
        total_h = (count_y - 1) * step_y + (base.height or 0)
        start_x = base.x - total_w / 2
        start_y = base.y - total_h / 2

        positions = [
            PositionResult(
                x=self.clamp_x(start_x + col * step_x),
                y=self.clamp_y(start_y + row * step_y),
                width=base.width,
                height=base.height,
                region=base.region,
                anchor=base.anchor,
            )
            for row in range(count_y)
            for col in range(count_x)
        ]
        return RepetitionResult(positions, Bounds(start_x, start_y, total_w, total_h))

    def _radial(self, spec: LayoutSpecification, base: PositionResult) -> RepetitionResult:
        repeat = spec.repeat
        count = repeat.count[0] if isinstance(repeat.count, list) else repeat.count
        radius = repeat.radius or DEFAULT_RADIAL_RADIUS
        positions = []
        for i in range(count):
            angle = i / count * 2 * math.pi
            positions.append(PositionResult(
                x=self.clamp_x(base.x + math.cos(angle) * radius),
                y=self.clamp_y(base.y + math.sin(angle) * radius),
                width=base.width,
                height=base.height,
                region=base.region,
                anchor=base.anchor,
            ))
        w, h = base.width or 0, base.height or 0
        total = Bounds(base.x - radius - w / 2, base.y - radius - h / 2, 2 * radius + w, 2 * radius + h)
        return RepetitionResult(positions, total)

    # -- path commands ----------------------------------------------------

    def transform_path_commands(
        self, commands: list[PathCommand], spec: LayoutSpecification
    ) -> list[PathCommand] | LayoutIssue:
        """Translate commands (local to the anchor point) to each resolved position.

        Repeated copies after the first start with a Move to their position.
        """
        position = self.calculate_position(spec)
        if isinstance(position, LayoutIssue):
            return position
        if spec.repeat is None:
            return self._translate(commands, position.x, position.y)

        repetition = self.generate_repetition(spec, position)
        if isinstance(repetition, LayoutIssue):
            return repetition
        result: list[PathCommand] = []
        for index, pos in enumerate(repetition.positions):
            moved = self._translate(commands, pos.x, pos.y)
            if index > 0 and moved and moved[0].cmd != "M":
                result.append(PathCommand(cmd="M", coords=[pos.x, pos.y]))
            result.extend(moved)
        return result

    def _translate(self, commands: list[PathCommand], dx: float, dy: float) -> list[PathCommand]:
        out = []
        for command in commands:
            if command.cmd == "Z":
                out.append(command.model_copy())
                continue
            coords = [
                self.clamp_x(c + dx) if i % 2 == 0 else self.clamp_y(c + dy)
                for i, c in enumerate(command.coords)
            ]
            out.append(PathCommand(cmd=command.cmd, coords=coords))
        return out

    @staticmethod
    def calculate_bounding_box(commands: list[PathCommand]) -> Bounds:
        """Axis-aligned box over every non-Z coordinate pair."""
        points = [
            (command.coords[i], command.coords[i + 1])
            for command in commands
            if command.cmd != "Z"
            for i in range(0, len(command.coords) - 1, 2)
        ]
        if not points:
            return Bounds(0, 0, 0, 0)
        arr = np.asarray(points, dtype=float)
        min_x, min_y = arr.min(axis=0)
        max_x, max_y = arr.max(axis=0)
        return Bounds(float(min_x), float(min_y), float(max_x - min_x), float(max_y - min_y))

    def scale_path_to_fit(
        self,
        commands: list[PathCommand],
        target_width: float,
        target_height: float,
        maintain_aspect_ratio: bool = True,
    ) -> list[PathCommand]:
        bounds = self.calculate_bounding_box(commands)
        if bounds.width == 0 or bounds.height == 0:
            return commands

        sx = target_width / bounds.width
        sy = target_height / bounds.height
        if maintain_aspect_ratio:
            sx = sy = min(sx, sy)

        out = []
        for command in commands:
            if command.cmd == "Z":
                out.append(command.model_copy())
                continue
            coords = [
                self.clamp_x((c - bounds.x) * sx) if i % 2 == 0 else self.clamp_y((c - bounds.y) * sy)
                for i, c in enumerate(command.coords)
            ]
            out.append(PathCommand(cmd=command.cmd, coords=coords))
        return out

    # -- conversion -------------------------------------------------------

    def normalized_to_pixel(self, x: float, y: float) -> tuple[float, float]:
        return (self.clamp_x(x * self.canvas_width), self.clamp_y(y * self.canvas_height))

    def pixel_to_normalized(self, px: float, py: float) -> tuple[float, float]:
        return (px / self.canvas_width, py / self.canvas_height)

    @staticmethod
    def round_coordinates(x: float, y: float, precision: int = COORDINATE_PRECISION) -> tuple[float, float]:
        return (round(x, precision), round(y, precision))
