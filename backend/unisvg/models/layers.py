"""Read-only views derived from a document's layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from unisvg.layout.geometry import Bounds
from unisvg.models.document import UnifiedLayer


class Complexity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class LayerAnalysis:
    layer_id: str
    label: str
    path_count: int
    command_count: int
    complexity: Complexity
    regions: tuple[str, ...]
    anchors: tuple[str, ...]
    bounds: Bounds | None
    estimated_render_time_ms: float
    estimated_memory_bytes: int


@dataclass(frozen=True)
class LayerValidationResult:
    valid: bool
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    suggestions: tuple[str, ...] = ()


@dataclass(frozen=True)
class LayerMerge:
    target_id: str
    merged_ids: tuple[str, ...]


@dataclass(frozen=True)
class LayerOptimization:
    original_count: int
    optimized_count: int
    removed_layer_ids: tuple[str, ...]
    merges: tuple[LayerMerge, ...]
    optimized_layers: tuple[UnifiedLayer, ...]
    performance_gain: float
    suggestions: tuple[str, ...] = ()


@dataclass
class LayerHierarchy:
    layer_id: str
    level: int
    parent_id: str | None = None
    children: list[str] = field(default_factory=list)
    dependencies: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class LayerGroup:
    name: str
    layer_ids: tuple[str, ...]
    purpose: str
    priority: int


@dataclass(frozen=True)
class LayerStatistics:
    total_layers: int
    total_paths: int
    total_commands: int
    average_paths_per_layer: float
    average_commands_per_path: float
    complexity_distribution: dict[str, int]
    region_usage: dict[str, int]
