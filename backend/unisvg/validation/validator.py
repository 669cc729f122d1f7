"""Multi-pass validator for unified-layered documents.

Passes (structure, style, layout, commands, performance) all run; nothing
short-circuits, so a report lists every problem found. Problems are returned
as ValidationIssue data and never raised.
"""

from __future__ import annotations

import dataclasses
import logging
import re
from dataclasses import dataclass
from typing import Any

import numpy as np
from pydantic import ValidationError

from unisvg.errors import InvalidBoundsError, NameConflictError
from unisvg.layout import canvas
from unisvg.layout.constants import (
    ANCHOR_OFFSETS,
    COMMAND_ARITY,
    COORDINATE_MAX,
    COORDINATE_MIN,
    COORDINATE_PRECISION,
    SCHEMA_VERSION,
)
from unisvg.layout.geometry import Bounds
from unisvg.layout.regions import RegionResolver
from unisvg.models.document import LayoutSpecification, UnifiedLayeredDocument, UnifiedPath
from unisvg.models.validation import (
    CoordinateRange,
    IssueCategory,
    Severity,
    ValidationIssue,
    ValidationReport,
    ValidationStatistics,
)

logger = logging.getLogger(__name__)

HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")

_FEEDBACK_HEADINGS = {
    IssueCategory.STRUCTURE: "Structure issues:",
    IssueCategory.STYLE: "Style issues:",
    IssueCategory.LAYOUT: "Layout language issues:",
}
COMMAND_HEADING = "Path command issues:"
_FEEDBACK_ORDER = (*_FEEDBACK_HEADINGS.values(), COMMAND_HEADING)


def _feedback_heading(issue: ValidationIssue) -> str | None:
    # errors located on a single command are grouped apart from their category
    if issue.path and ".commands[" in issue.path:
        return COMMAND_HEADING
    return _FEEDBACK_HEADINGS.get(issue.category)


@dataclass
class ValidatorOptions:
    """Validator switches and heuristic thresholds."""

    strict_mode: bool = False  # coordinate range violations become errors
    enable_auto_fix: bool = True
    enforce_coordinate_bounds: bool = True
    validate_layout_language: bool = True

    # Performance warnings (never fail validation)
    max_layers: int = 10
    max_paths_per_layer: int = 20
    max_commands_per_path: int = 50
    large_canvas_size: int = 2048

    # Structural hard limit
    max_canvas_size: int = 8192


def _fmt(value: float) -> str:
    return f"{value:g}"


def is_valid_color(value: str | None) -> bool:
    return value is None or value == "none" or bool(HEX_COLOR.match(value))


class _Collector:
    def __init__(self, strict: bool):
        self.errors: list[ValidationIssue] = []
        self.warnings: list[ValidationIssue] = []
        self.strict = strict

    def error(self, category: IssueCategory, message: str, path: str | None = None) -> None:
        self.errors.append(ValidationIssue(
            severity=Severity.ERROR, category=category, message=message, path=path,
        ))

    def warning(self, category: IssueCategory, message: str, path: str | None = None) -> None:
        self.warnings.append(ValidationIssue(
            severity=Severity.WARNING, category=category, message=message, path=path,
        ))

    def coordinate(self, message: str, path: str) -> None:
        if self.strict:
            self.error(IssueCategory.STRUCTURE, message, path)
        else:
            self.warning(IssueCategory.STRUCTURE, message, path)


class DocumentValidator:
    """Stateless apart from its options; one instance can validate many documents."""

    def __init__(self, options: ValidatorOptions | None = None, **overrides: Any):
        self.options = options or ValidatorOptions()
        if overrides:
            self.update_options(**overrides)

    def update_options(self, **changes: Any) -> None:
        self.options = dataclasses.replace(self.options, **changes)

    def get_options(self) -> ValidatorOptions:
        return dataclasses.replace(self.options)

    # ------------------------------------------------------------------

    def validate(
        self,
        document: UnifiedLayeredDocument | dict[str, Any],
        auto_fix: bool | None = None,
    ) -> ValidationReport:
        if isinstance(document, dict):
            try:
                document = UnifiedLayeredDocument.model_validate(document)
            except ValidationError as exc:
                return self._schema_failure(exc)

        out = _Collector(self.options.strict_mode)
        resolver = self._build_resolver(document, out)

        self._check_structure(document, out)
        self._check_styles(document, out)
        if self.options.validate_layout_language:
            self._check_layout(document, resolver, out)
        self._check_commands(document, out)
        self._check_performance(document, out)

        fix_enabled = self.options.enable_auto_fix if auto_fix is None else auto_fix
        fixed, fixes = (self.auto_fix(document) if fix_enabled else (None, 0))

        report = ValidationReport(
            success=not out.errors,
            errors=tuple(out.errors),
            warnings=tuple(out.warnings),
            statistics=self.collect_statistics(document),
            auto_fix_applied=fixes > 0,
            fixed_document=fixed if fixes > 0 else None,
        )
        logger.debug(
            "Validated document: %d errors, %d warnings, %d auto-fixes",
            len(report.errors), len(report.warnings), fixes,
        )
        return report

    def _schema_failure(self, exc: ValidationError) -> ValidationReport:
        out = _Collector(self.options.strict_mode)
        for problem in exc.errors():
            location = ".".join(str(part) for part in problem["loc"])
            out.error(IssueCategory.STRUCTURE, f"Schema error at {location}: {problem['msg']}", location)
        return ValidationReport(success=False, errors=tuple(out.errors))

    def _build_resolver(self, document: UnifiedLayeredDocument, out: _Collector) -> RegionResolver:
        ratio = document.canvas.aspect_ratio if document.canvas else canvas.DEFAULT_RATIO
        resolver = RegionResolver(ratio if canvas.is_valid_ratio(ratio) else canvas.DEFAULT_RATIO)
        if document.layout is None:
            return resolver

        for index, region in enumerate(document.layout.custom_regions):
            path = f"layout.customRegions[{index}]"
            if not region.name:
                out.error(IssueCategory.LAYOUT, "Custom region must have a non-empty name", path)
                continue
            try:
                resolver.add_custom_region(
                    region.name, Bounds(region.x, region.y, region.width, region.height)
                )
            except (InvalidBoundsError, NameConflictError) as exc:
                out.error(IssueCategory.LAYOUT, str(exc), path)
        return resolver

    # -- structure ------------------------------------------------------

    def _check_structure(self, document: UnifiedLayeredDocument, out: _Collector) -> None:
        opts = self.options
        if document.version != SCHEMA_VERSION:
            out.error(IssueCategory.STRUCTURE, f"Invalid document version: {document.version}", "version")

        board = document.canvas
        if board is None:
            out.error(IssueCategory.STRUCTURE, "Document missing canvas configuration", "canvas")
        else:
            if board.width <= 0 or board.height <= 0:
                out.error(IssueCategory.STRUCTURE, "Canvas dimensions must be positive", "canvas")
            elif max(board.width, board.height) > opts.max_canvas_size:
                out.error(
                    IssueCategory.STRUCTURE,
                    f"Canvas dimensions exceed maximum of {opts.max_canvas_size}",
                    "canvas",
                )
            elif max(board.width, board.height) > opts.large_canvas_size:
                out.warning(
                    IssueCategory.PERFORMANCE,
                    f"Large canvas size {_fmt(board.width)}x{_fmt(board.height)} may impact rendering performance",
                    "canvas",
                )

            if not canvas.is_valid_ratio(board.aspect_ratio):
                out.error(IssueCategory.STRUCTURE, f"Unsupported aspect ratio: {board.aspect_ratio}", "canvas.aspectRatio")
            elif board.width > 0 and board.height > 0:
                expected = canvas.get_config(board.aspect_ratio).ratio
                if abs(board.width / board.height - expected) > 0.01:
                    out.warning(
                        IssueCategory.STRUCTURE,
                        f"Canvas dimensions {_fmt(board.width)}x{_fmt(board.height)} "
                        f"don't match aspect ratio {board.aspect_ratio}",
                        "canvas",
                    )

        if not document.layers:
            out.error(IssueCategory.STRUCTURE, "Document must contain at least one layer", "layers")

        seen_layers: set[str] = set()
        for i, layer in enumerate(document.layers):
            where = f"layers[{i}]"
            if not layer.id:
                out.error(IssueCategory.STRUCTURE, f"Layer {i} missing required id", where)
            elif layer.id in seen_layers:
                out.error(IssueCategory.STRUCTURE, f"Duplicate layer id: {layer.id}", where)
            seen_layers.add(layer.id)
            name = layer.id or str(i)

            if not layer.label.strip():
                out.warning(IssueCategory.STRUCTURE, f"Layer {name} missing descriptive label", where)
            if not layer.paths:
                out.error(IssueCategory.STRUCTURE, f"Layer {name} contains no paths", where)

            seen_paths: set[str] = set()
            for j, path in enumerate(layer.paths):
                path_where = f"{where}.paths[{j}]"
                if not path.id:
                    out.error(IssueCategory.STRUCTURE, f"Path {j} in layer {name} missing required id", path_where)
                elif path.id in seen_paths:
                    out.error(IssueCategory.STRUCTURE, f"Duplicate path id in layer {name}: {path.id}", path_where)
                seen_paths.add(path.id)
                if not path.commands:
                    out.error(IssueCategory.STRUCTURE, f"Path {path.id or j} contains no commands", path_where)

    # -- style ----------------------------------------------------------

    def _check_styles(self, document: UnifiedLayeredDocument, out: _Collector) -> None:
        for i, layer in enumerate(document.layers):
            for j, path in enumerate(layer.paths):
                self._check_style(path, f"layers[{i}].paths[{j}].style", out)

    def _check_style(self, path: UnifiedPath, where: str, out: _Collector) -> None:
        style = path.style
        if not is_valid_color(style.fill):
            out.error(IssueCategory.STYLE, f"Invalid fill color: {style.fill}", where)
        if not is_valid_color(style.stroke):
            out.error(IssueCategory.STYLE, f"Invalid stroke color: {style.stroke}", where)
        if style.stroke_width is not None and style.stroke_width < 0:
            out.error(IssueCategory.STYLE, f"Invalid stroke width: {_fmt(style.stroke_width)}", where)
        if style.opacity is not None and not 0 <= style.opacity <= 1:
            out.error(IssueCategory.STYLE, f"Invalid opacity: {_fmt(style.opacity)}", where)

        no_fill = style.fill in (None, "none")
        no_stroke = style.stroke in (None, "none")
        if no_fill and no_stroke:
            out.warning(IssueCategory.STYLE, f"Path {path.id} has no fill or stroke and will be invisible", where)
        if style.stroke_width is not None and 0 < style.stroke_width < 1:
            out.warning(IssueCategory.STYLE, "Stroke width less than 1 may not be visible", where)

    # -- layout ---------------------------------------------------------

    def _check_layout(
        self, document: UnifiedLayeredDocument, resolver: RegionResolver, out: _Collector
    ) -> None:
        doc_layout = document.layout
        if doc_layout is not None:
            if doc_layout.global_anchor and doc_layout.global_anchor not in ANCHOR_OFFSETS:
                out.error(IssueCategory.LAYOUT, f"Invalid anchor: {doc_layout.global_anchor}", "layout.globalAnchor")
            if doc_layout.global_offset is not None:
                self._check_offset(doc_layout.global_offset, "layout.globalOffset", out)

        for i, layer in enumerate(document.layers):
            if layer.layout is not None:
                self._check_layout_spec(layer.layout, resolver, f"layers[{i}].layout", out)
            for j, path in enumerate(layer.paths):
                if path.layout is not None:
                    self._check_layout_spec(path.layout, resolver, f"layers[{i}].paths[{j}].layout", out)

    def _check_layout_spec(
        self, spec: LayoutSpecification, resolver: RegionResolver, where: str, out: _Collector
    ) -> None:
        if spec.region is not None and not resolver.has_region(spec.region):
            out.error(IssueCategory.LAYOUT, f"Unknown region: {spec.region}", where)
        if spec.anchor is not None and spec.anchor not in ANCHOR_OFFSETS:
            out.error(IssueCategory.LAYOUT, f"Invalid anchor: {spec.anchor}", where)
        if spec.offset is not None:
            self._check_offset(spec.offset, where, out)

        size = spec.size
        if size is not None:
            if len(size.variants_set()) > 1:
                out.error(
                    IssueCategory.LAYOUT,
                    "Size specification must set at most one of absolute, relative, aspect_constrained",
                    where,
                )
            if size.relative is not None and not 0 < size.relative <= 1:
                out.error(
                    IssueCategory.LAYOUT,
                    f"Relative size must be between 0 and 1, got {_fmt(size.relative)}",
                    where,
                )
            if size.absolute is not None and (size.absolute.width <= 0 or size.absolute.height <= 0):
                out.error(IssueCategory.LAYOUT, "Absolute size must be positive", where)
            constrained = size.aspect_constrained
            if constrained is not None and (constrained.width <= 0 or constrained.aspect <= 0):
                out.error(IssueCategory.LAYOUT, "Aspect-constrained size needs a positive width and aspect", where)

        repeat = spec.repeat
        if repeat is not None:
            if repeat.type not in ("grid", "radial"):
                out.error(IssueCategory.LAYOUT, f"Invalid repetition type: {repeat.type}", where)
            counts = repeat.count if isinstance(repeat.count, list) else [repeat.count]
            if not counts or any(c <= 0 for c in counts):
                out.error(IssueCategory.LAYOUT, "Repetition count must be a positive integer", where)

    @staticmethod
    def _check_offset(offset: list[float], where: str, out: _Collector) -> None:
        if len(offset) != 2:
            out.error(IssueCategory.LAYOUT, f"Offset must have exactly 2 values, got {len(offset)}", where)
        elif any(not -1 <= v <= 1 for v in offset):
            shown = ", ".join(_fmt(v) for v in offset)
            out.error(IssueCategory.LAYOUT, f"Offset values must be between -1 and 1, got [{shown}]", where)

    # -- commands -------------------------------------------------------

    def _check_commands(self, document: UnifiedLayeredDocument, out: _Collector) -> None:
        for i, layer in enumerate(document.layers):
            for j, path in enumerate(layer.paths):
                where = f"layers[{i}].paths[{j}]"
                if path.commands and path.commands[0].cmd != "M":
                    out.warning(
                        IssueCategory.STRUCTURE,
                        f"Path {path.id or j} should start with a Move (M) command",
                        where,
                    )

                subpath_open = False
                for k, command in enumerate(path.commands):
                    cmd_where = f"{where}.commands[{k}]"
                    if command.cmd not in COMMAND_ARITY:
                        out.error(IssueCategory.STRUCTURE, f"Invalid path command '{command.cmd}' at index {k}", cmd_where)
                        continue

                    expected = COMMAND_ARITY[command.cmd]
                    if len(command.coords) != expected:
                        out.error(
                            IssueCategory.STRUCTURE,
                            f"Command '{command.cmd}' expects {expected} coordinates, got {len(command.coords)}",
                            cmd_where,
                        )

                    if command.cmd == "M":
                        subpath_open = True
                    elif command.cmd == "Z":
                        if not subpath_open:
                            out.warning(
                                IssueCategory.STRUCTURE,
                                f"Close (Z) command at index {k} has no open subpath",
                                cmd_where,
                            )
                        subpath_open = False

                    if self.options.enforce_coordinate_bounds:
                        self._check_bounds(command.coords, cmd_where, out)

    @staticmethod
    def _check_bounds(coords: list[float], where: str, out: _Collector) -> None:
        for x, y in zip(coords[0::2], coords[1::2]):
            if not (COORDINATE_MIN <= x <= COORDINATE_MAX and COORDINATE_MIN <= y <= COORDINATE_MAX):
                out.coordinate(
                    f"Coordinate ({_fmt(x)}, {_fmt(y)}) outside valid range "
                    f"[{COORDINATE_MIN}, {COORDINATE_MAX}]",
                    where,
                )

    # -- performance ----------------------------------------------------

    def _check_performance(self, document: UnifiedLayeredDocument, out: _Collector) -> None:
        opts = self.options
        if len(document.layers) > opts.max_layers:
            out.warning(
                IssueCategory.PERFORMANCE,
                f"Document has {len(document.layers)} layers, exceeding recommended maximum of {opts.max_layers}",
                "layers",
            )
        for i, layer in enumerate(document.layers):
            if len(layer.paths) > opts.max_paths_per_layer:
                out.warning(
                    IssueCategory.PERFORMANCE,
                    f"Layer {layer.id or i} has {len(layer.paths)} paths, "
                    f"exceeding recommended maximum of {opts.max_paths_per_layer}",
                    f"layers[{i}]",
                )
            for j, path in enumerate(layer.paths):
                if len(path.commands) > opts.max_commands_per_path:
                    out.warning(
                        IssueCategory.PERFORMANCE,
                        f"Path {path.id or j} has {len(path.commands)} commands, "
                        f"exceeding recommended maximum of {opts.max_commands_per_path}",
                        f"layers[{i}].paths[{j}]",
                    )

    # -- statistics -----------------------------------------------------

    @staticmethod
    def collect_statistics(document: UnifiedLayeredDocument) -> ValidationStatistics:
        regions: dict[str, None] = {}
        anchors: dict[str, None] = {}
        points: list[tuple[float, float]] = []
        path_count = command_count = 0

        for layer in document.layers:
            layouts = [layer.layout] + [path.layout for path in layer.paths]
            for spec in layouts:
                if spec is None:
                    continue
                if spec.region:
                    regions.setdefault(spec.region)
                if spec.anchor:
                    anchors.setdefault(spec.anchor)
            for path in layer.paths:
                path_count += 1
                command_count += len(path.commands)
                for command in path.commands:
                    if command.cmd != "Z":
                        points.extend(zip(command.coords[0::2], command.coords[1::2]))

        coordinate_range = CoordinateRange()
        if points:
            arr = np.asarray(points, dtype=float)
            coordinate_range = CoordinateRange(
                min_x=float(arr[:, 0].min()),
                max_x=float(arr[:, 0].max()),
                min_y=float(arr[:, 1].min()),
                max_y=float(arr[:, 1].max()),
            )

        return ValidationStatistics(
            layer_count=len(document.layers),
            path_count=path_count,
            command_count=command_count,
            regions_used=tuple(regions),
            anchors_used=tuple(anchors),
            coordinate_range=coordinate_range,
        )

    # -- auto-fix -------------------------------------------------------

    @staticmethod
    def auto_fix(document: UnifiedLayeredDocument) -> tuple[UnifiedLayeredDocument, int]:
        """Copy of the document with synthetic ids and clamped coordinates.

        Returns the copy and the number of fixes made. Semantic problems
        (colors, arity, unknown regions) are left alone.
        """
        fixed = document.model_copy(deep=True)
        fixes = 0

        layer_ids = {layer.id for layer in fixed.layers if layer.id}
        path_number = 0
        for i, layer in enumerate(fixed.layers, start=1):
            if not layer.id:
                candidate = f"layer_{i}"
                while candidate in layer_ids:
                    candidate += "_"
                layer.id = candidate
                layer_ids.add(candidate)
                fixes += 1

            path_ids = {path.id for path in layer.paths if path.id}
            for path in layer.paths:
                path_number += 1
                if not path.id:
                    candidate = f"path_{path_number}"
                    while candidate in path_ids:
                        candidate += "_"
                    path.id = candidate
                    path_ids.add(candidate)
                    fixes += 1

                for command in path.commands:
                    clamped = [
                        round(min(max(c, COORDINATE_MIN), COORDINATE_MAX), COORDINATE_PRECISION)
                        for c in command.coords
                    ]
                    if any(c < COORDINATE_MIN or c > COORDINATE_MAX for c in command.coords):
                        fixes += 1
                    command.coords = clamped

        return fixed, fixes

    # -- feedback -------------------------------------------------------

    @staticmethod
    def generate_model_feedback(report: ValidationReport) -> list[str]:
        """Ordered correction hints for an upstream generator retry.

        Errors first, grouped by category; performance recommendations last.
        """
        lines: list[str] = []
        if report.errors:
            lines.append("Critical issues found:")
            for heading in _FEEDBACK_ORDER:
                issues = [issue for issue in report.errors if _feedback_heading(issue) == heading]
                if issues:
                    lines.append(heading)
                    lines.extend(f"- {issue.message}" for issue in issues)

        coordinate = [w for w in report.warnings if "outside valid range" in w.message]
        if coordinate:
            lines.append("Coordinate warnings:")
            lines.extend(
                f"- {w.message}. Keep all coordinates between {COORDINATE_MIN} and {COORDINATE_MAX}"
                for w in coordinate
            )

        other = [
            w for w in report.warnings
            if w.category != IssueCategory.PERFORMANCE and w not in coordinate
        ]
        if other:
            lines.append("Warnings:")
            lines.extend(f"- {w.message}" for w in other)

        performance = [w for w in report.warnings if w.category == IssueCategory.PERFORMANCE]
        if performance:
            lines.append("Performance recommendations:")
            lines.extend(f"- {w.message}" for w in performance)
        return lines
