"""Layer analysis, cross-layer validation, optimization and grouping.

Analyses are cached by layer object identity plus canvas size and
optimizations by a content signature. Both caches are LRU bounded by
AnalyzerConfig.max_cached_entries. Neither notices in-place edits: call
clear_cache() after mutating a layer that was already analyzed.
"""

from __future__ import annotations

import json
import logging
import re
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any

from unisvg.cache import make_key
from unisvg.layout.constants import DEFAULT_REGION
from unisvg.layout.coordinate_mapper import CoordinateMapper
from unisvg.layout.geometry import Bounds
from unisvg.layout.regions import RegionResolver
from unisvg.models.document import PathCommand, UnifiedLayer, UnifiedLayeredDocument
from unisvg.models.layers import (
    Complexity,
    LayerAnalysis,
    LayerGroup,
    LayerHierarchy,
    LayerMerge,
    LayerOptimization,
    LayerStatistics,
    LayerValidationResult,
)

logger = logging.getLogger(__name__)

GENERIC_NAME = re.compile(r"^(layer|group|item)\d*$", re.IGNORECASE)
KEYWORD_SPLIT = re.compile(r"[\s_-]+")
STOP_WORDS = frozenset({"the", "and", "for", "with"})

REGION_PRIORITY: dict[str, int] = {
    "center": 10,
    "full_canvas": 9,
    "top_center": 8,
    "bottom_center": 7,
    "middle_left": 6,
    "middle_right": 6,
    "top_left": 5,
    "top_right": 5,
    "bottom_left": 4,
    "bottom_right": 4,
}
DEFAULT_PRIORITY = 3


@dataclass
class AnalyzerConfig:
    # Complexity classes: (max paths, max commands)
    low_max_paths: int = 5
    low_max_commands: int = 20
    medium_max_paths: int = 15
    medium_max_commands: int = 100

    # Cost model
    render_ms_per_path: float = 0.1
    render_ms_per_command: float = 0.01
    memory_base_bytes: int = 100
    memory_per_path: int = 50
    memory_per_command: int = 20

    # Organization warnings
    max_layers: int = 20
    max_paths_per_layer: int = 50

    # Entries kept per cache before the least recently used is evicted
    max_cached_entries: int = 256


def layer_region(layer: UnifiedLayer) -> str:
    return (layer.layout.region if layer.layout else None) or DEFAULT_REGION


def style_signature(layer: UnifiedLayer) -> tuple[str, ...]:
    return tuple(sorted({
        json.dumps(path.style.model_dump(exclude_none=True), sort_keys=True)
        for path in layer.paths
    }))


class LayerAnalyzer:
    def __init__(
        self,
        resolver: RegionResolver | None = None,
        config: AnalyzerConfig | None = None,
    ):
        self.resolver = resolver or RegionResolver()
        self.mapper = CoordinateMapper(self.resolver)
        self.config = config or AnalyzerConfig()
        self._analysis_cache: OrderedDict[tuple[int, float, float], tuple[UnifiedLayer, LayerAnalysis]] = OrderedDict()
        self._optimization_cache: OrderedDict[str, LayerOptimization] = OrderedDict()

    # ------------------------------------------------------------------
    # Per-layer analysis
    # ------------------------------------------------------------------

    def analyze_layer(self, layer: UnifiedLayer, canvas_w: float = 512, canvas_h: float = 512) -> LayerAnalysis:
        key = (id(layer), canvas_w, canvas_h)
        cached = self._cached(self._analysis_cache, key)
        if cached is not None and cached[0] is layer:
            return cached[1]

        analysis = self._analyze(layer, canvas_w, canvas_h)
        # layer kept alive so its id() stays unique while cached
        self._remember(self._analysis_cache, key, (layer, analysis))
        return analysis

    def _analyze(self, layer: UnifiedLayer, canvas_w: float, canvas_h: float) -> LayerAnalysis:
        cfg = self.config
        path_count = len(layer.paths)
        command_count = sum(len(path.commands) for path in layer.paths)

        regions: dict[str, None] = {}
        anchors: dict[str, None] = {}
        for spec in [layer.layout] + [path.layout for path in layer.paths]:
            if spec is None:
                continue
            if spec.region:
                regions.setdefault(spec.region)
            if spec.anchor:
                anchors.setdefault(spec.anchor)

        return LayerAnalysis(
            layer_id=layer.id,
            label=layer.label,
            path_count=path_count,
            command_count=command_count,
            complexity=self.classify_complexity(path_count, command_count),
            regions=tuple(regions),
            anchors=tuple(anchors),
            bounds=self._layer_bounds(layer, canvas_w, canvas_h),
            estimated_render_time_ms=path_count * cfg.render_ms_per_path + command_count * cfg.render_ms_per_command,
            estimated_memory_bytes=cfg.memory_base_bytes + cfg.memory_per_path * path_count
            + cfg.memory_per_command * command_count,
        )

    def classify_complexity(self, path_count: int, command_count: int) -> Complexity:
        cfg = self.config
        if path_count <= cfg.low_max_paths and command_count <= cfg.low_max_commands:
            return Complexity.LOW
        if path_count <= cfg.medium_max_paths and command_count <= cfg.medium_max_commands:
            return Complexity.MEDIUM
        return Complexity.HIGH

    def _layer_bounds(self, layer: UnifiedLayer, canvas_w: float, canvas_h: float) -> Bounds | None:
        commands: list[PathCommand] = [c for path in layer.paths for c in path.commands]
        if any(c.cmd != "Z" and len(c.coords) >= 2 for c in commands):
            box = self.mapper.calculate_bounding_box(commands)
            left, top = max(0.0, box.x), max(0.0, box.y)
            right, bottom = min(canvas_w, box.right), min(canvas_h, box.bottom)
            return Bounds(left, top, max(0.0, right - left), max(0.0, bottom - top))

        # no geometry: fall back to the layer's region
        region = layer_region(layer)
        if not self.resolver.has_region(region):
            return None
        return self.resolver.get_region_bounds(region).scaled(canvas_w, canvas_h)

    def generate_layer_metadata(self, document: UnifiedLayeredDocument) -> list[dict]:
        """Per-layer summary used for API responses."""
        canvas_w = document.canvas.width if document.canvas else 512
        canvas_h = document.canvas.height if document.canvas else 512
        metadata = []
        for layer in document.layers:
            analysis = self.analyze_layer(layer, canvas_w, canvas_h)
            metadata.append({
                "id": layer.id,
                "label": layer.label,
                "path_count": analysis.path_count,
                "region": layer.layout.region if layer.layout else None,
                "anchor": layer.layout.anchor if layer.layout else None,
                "bounds": analysis.bounds,
                "complexity": analysis.complexity.value,
            })
        return metadata

    # ------------------------------------------------------------------
    # Cross-layer validation
    # ------------------------------------------------------------------

    def validate_layers(self, layers: list[UnifiedLayer]) -> LayerValidationResult:
        errors: list[str] = []
        warnings: list[str] = []
        suggestions: list[str] = []

        seen: set[str] = set()
        for layer in layers:
            if not layer.id:
                errors.append("Layer must have a non-empty ID")
            elif layer.id in seen:
                errors.append(f"Duplicate layer ID: {layer.id}")
            seen.add(layer.id)

            if not layer.label.strip():
                warnings.append(f"Layer {layer.id} should have a descriptive label")
            if not layer.paths:
                warnings.append(f"Layer {layer.id} has no paths")
                suggestions.append(f"Consider removing empty layer {layer.id} or adding content")

            path_ids: set[str] = set()
            for path in layer.paths:
                if path.id in path_ids:
                    errors.append(f"Duplicate path ID in layer {layer.id}: {path.id}")
                path_ids.add(path.id)
                if not path.commands:
                    warnings.append(f"Path {path.id} in layer {layer.id} has no commands")

            for spec in [layer.layout] + [path.layout for path in layer.paths]:
                if spec is None:
                    continue
                if spec.region and not self.resolver.has_region(spec.region):
                    errors.append(f"Invalid region: {spec.region}")
                if spec.offset and len(spec.offset) >= 2:
                    x, y = spec.offset[0], spec.offset[1]
                    if abs(x) > 1 or abs(y) > 1:
                        warnings.append(f"Large offset values may cause positioning issues: [{x:g}, {y:g}]")

        cfg = self.config
        if len(layers) > cfg.max_layers:
            warnings.append(f"High layer count ({len(layers)}) may impact performance")
            suggestions.append("Consider grouping related paths into fewer layers")
        for layer in layers:
            if len(layer.paths) > cfg.max_paths_per_layer:
                warnings.append(f"Layer {layer.id} has many paths ({len(layer.paths)})")
                suggestions.append(f"Consider splitting layer {layer.id} into multiple layers")

        generic = [
            layer.id for layer in layers
            if GENERIC_NAME.match(layer.id) or GENERIC_NAME.match(layer.label)
        ]
        if generic:
            suggestions.append(f"Use more descriptive names for layers: {', '.join(generic)}")

        return LayerValidationResult(
            valid=not errors,
            errors=tuple(errors),
            warnings=tuple(warnings),
            suggestions=tuple(suggestions),
        )

    # ------------------------------------------------------------------
    # Optimization
    # ------------------------------------------------------------------

    def optimize_layers(self, layers: list[UnifiedLayer]) -> LayerOptimization:
        key = make_key("opt", [layer.model_dump() for layer in layers])
        cached = self._cached(self._optimization_cache, key)
        if cached is not None:
            return cached

        result = self._optimize(layers)
        self._remember(self._optimization_cache, key, result)
        return result

    def _optimize(self, layers: list[UnifiedLayer]) -> LayerOptimization:
        removed = [layer.id for layer in layers if not layer.paths]
        suggestions: list[str] = []
        if removed:
            suggestions.append(f"Removed {len(removed)} empty layers")

        groups: dict[tuple, list[UnifiedLayer]] = {}
        for layer in layers:
            if layer.paths:
                groups.setdefault((layer_region(layer), style_signature(layer)), []).append(layer)

        merges: list[LayerMerge] = []
        optimized: list[UnifiedLayer] = []
        absorbed: set[int] = set()
        for layer in layers:
            if not layer.paths or id(layer) in absorbed:
                continue
            group = groups[(layer_region(layer), style_signature(layer))]
            if len(group) > 1 and group[0] is layer:
                merged = layer.model_copy(deep=True)
                for other in group[1:]:
                    merged.paths.extend(p.model_copy(deep=True) for p in other.paths)
                    absorbed.add(id(other))
                merges.append(LayerMerge(layer.id, tuple(other.id for other in group[1:])))
                suggestions.append(f"Merged {len(group)} similar layers")
                optimized.append(merged)
            else:
                optimized.append(layer)

        original = len(layers)
        gain = (original - len(optimized)) / original * 100 if original else 0.0
        if merges or removed:
            logger.debug("Layer optimization: %d -> %d layers", original, len(optimized))

        return LayerOptimization(
            original_count=original,
            optimized_count=len(optimized),
            removed_layer_ids=tuple(removed),
            merges=tuple(merges),
            optimized_layers=tuple(optimized),
            performance_gain=gain,
            suggestions=tuple(suggestions),
        )

    # ------------------------------------------------------------------
    # Hierarchy and grouping
    # ------------------------------------------------------------------

    def create_layer_hierarchy(self, layers: list[UnifiedLayer]) -> list[LayerHierarchy]:
        """Parent = nearest preceding layer in the same region."""
        nodes = [LayerHierarchy(layer_id=layer.id, level=index // 5) for index, layer in enumerate(layers)]
        last_in_region: dict[str, LayerHierarchy] = {}
        members: dict[str, list[str]] = {}

        for layer, node in zip(layers, nodes):
            region = layer_region(layer)
            parent = last_in_region.get(region)
            if parent is not None:
                node.parent_id = parent.layer_id
                parent.children.append(node.layer_id)
            last_in_region[region] = node
            members.setdefault(region, []).append(layer.id)

        for layer, node in zip(layers, nodes):
            node.dependencies = [
                other for other in members[layer_region(layer)] if other != layer.id
            ]
        return nodes

    def group_layers_by_purpose(self, layers: list[UnifiedLayer]) -> list[LayerGroup]:
        groups: list[LayerGroup] = []

        by_region: dict[str, list[str]] = {}
        for layer in layers:
            by_region.setdefault(layer_region(layer), []).append(layer.id)
        for region, ids in by_region.items():
            if len(ids) > 1:
                groups.append(LayerGroup(
                    name=f"{region}_group",
                    layer_ids=tuple(ids),
                    purpose=f"Layers positioned in {region} region",
                    priority=REGION_PRIORITY.get(region, DEFAULT_PRIORITY),
                ))

        by_keyword: dict[str, list[str]] = {}
        for layer in layers:
            for keyword in dict.fromkeys(extract_keywords(layer.label)):
                by_keyword.setdefault(keyword, []).append(layer.id)
        for keyword, ids in by_keyword.items():
            if len(ids) > 1:
                groups.append(LayerGroup(
                    name=f"{keyword}_semantic_group",
                    layer_ids=tuple(ids),
                    purpose=f"Layers related to {keyword}",
                    priority=len(ids),
                ))
        return groups

    # ------------------------------------------------------------------
    # Statistics and cache
    # ------------------------------------------------------------------

    def get_layer_statistics(self, layers: list[UnifiedLayer]) -> LayerStatistics:
        total_paths = sum(len(layer.paths) for layer in layers)
        total_commands = sum(len(path.commands) for layer in layers for path in layer.paths)
        complexity = {c.value: 0 for c in Complexity}
        regions: dict[str, int] = {}
        for layer in layers:
            complexity[self.analyze_layer(layer).complexity.value] += 1
            region = layer_region(layer)
            regions[region] = regions.get(region, 0) + 1

        return LayerStatistics(
            total_layers=len(layers),
            total_paths=total_paths,
            total_commands=total_commands,
            average_paths_per_layer=total_paths / len(layers) if layers else 0.0,
            average_commands_per_path=total_commands / total_paths if total_paths else 0.0,
            complexity_distribution=complexity,
            region_usage=regions,
        )

    @staticmethod
    def _cached(cache: OrderedDict, key: Any) -> Any:
        value = cache.get(key)
        if value is not None:
            cache.move_to_end(key)
        return value

    def _remember(self, cache: OrderedDict, key: Any, value: Any) -> None:
        cache[key] = value
        cache.move_to_end(key)
        while len(cache) > self.config.max_cached_entries:
            cache.popitem(last=False)

    def clear_cache(self) -> None:
        self._analysis_cache.clear()
        self._optimization_cache.clear()

    def cache_stats(self) -> dict[str, int]:
        return {
            "layer_cache_size": len(self._analysis_cache),
            "optimization_cache_size": len(self._optimization_cache),
        }


def extract_keywords(label: str) -> list[str]:
    return [
        word for word in KEYWORD_SPLIT.split(label.lower())
        if len(word) > 2 and word not in STOP_WORDS
    ]
