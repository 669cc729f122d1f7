"""Validation report models. Reports are frozen once returned."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from unisvg.models.document import UnifiedLayeredDocument


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class IssueCategory(str, Enum):
    STRUCTURE = "structure"
    STYLE = "style"
    LAYOUT = "layout"
    PERFORMANCE = "performance"


class ValidationIssue(BaseModel):
    model_config = ConfigDict(frozen=True)

    severity: Severity
    category: IssueCategory
    message: str
    path: str | None = None


class CoordinateRange(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    min_x: float = Field(default=0.0, alias="minX")
    max_x: float = Field(default=0.0, alias="maxX")
    min_y: float = Field(default=0.0, alias="minY")
    max_y: float = Field(default=0.0, alias="maxY")


class ValidationStatistics(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    layer_count: int = Field(default=0, alias="layerCount")
    path_count: int = Field(default=0, alias="pathCount")
    command_count: int = Field(default=0, alias="commandCount")
    regions_used: tuple[str, ...] = Field(default=(), alias="regionsUsed")
    anchors_used: tuple[str, ...] = Field(default=(), alias="anchorsUsed")
    coordinate_range: CoordinateRange = Field(default_factory=CoordinateRange, alias="coordinateRange")


class ValidationReport(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    success: bool
    errors: tuple[ValidationIssue, ...] = ()
    warnings: tuple[ValidationIssue, ...] = ()
    statistics: ValidationStatistics = Field(default_factory=ValidationStatistics)
    auto_fix_applied: bool = Field(default=False, alias="autoFixApplied")
    fixed_document: UnifiedLayeredDocument | None = Field(default=None, alias="fixedDocument")

    def error_messages(self) -> list[str]:
        return [issue.message for issue in self.errors]

    def warning_messages(self) -> list[str]:
        return [issue.message for issue in self.warnings]
