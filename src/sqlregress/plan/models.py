"""
Data models for plan signatures, regressions and quality warnings.

These models are designed to be:
- Immutable (frozen=True): findings don't change after creation
- Flat and self-describing: model_dump() / model_validate() round-trip
  losslessly through whatever format the baseline layer writes
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class Severity(str, Enum):
    """
    Severity levels for regressions and warnings.

    CRITICAL: Access strategy got clearly worse; fails the verdict
    WARNING: Likely performance issue that should be looked at
    INFO: Plan changed in a way that may be better or worse
    """
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"

    def __lt__(self, other: object) -> bool:
        """Enable sorting by severity (CRITICAL > WARNING > INFO)."""
        if not isinstance(other, Severity):
            return NotImplemented
        order = {Severity.CRITICAL: 0, Severity.WARNING: 1, Severity.INFO: 2}
        return order[self] < order[other]


class ScanInfo(BaseModel):
    """How one relation is read in a plan."""

    model_config = ConfigDict(frozen=True)

    scan_type: str = Field(..., description="Node type that read the relation")
    index_name: str = Field(default="", description="Index used, empty if none")
    index_cond: str = Field(default="", description="Index condition, empty if none")
    filter: str = Field(default="", description="Row filter, empty if none")

    def describe(self) -> str:
        """'<scan type> using <index>' or just the scan type."""
        if self.index_name:
            return f"{self.scan_type} using {self.index_name}"
        return self.scan_type


class PlanSignature(BaseModel):
    """
    Compact, comparable summary of a plan tree's shape.

    Attributes:
        node_types: Every node type in pre-order visitation order
        relations: Relation name -> ScanInfo, last visited scan wins;
            a read-only mapping
        indexes_used: Index names in visitation order
        join_types: Join node types in visitation order
        has_seq_scan: Any "Seq Scan" node present
        has_sort: Any "Sort" node present
    """

    model_config = ConfigDict(frozen=True)

    node_types: tuple[str, ...] = ()
    relations: Mapping[str, ScanInfo] = Field(default_factory=dict, validate_default=True)
    indexes_used: tuple[str, ...] = ()
    join_types: tuple[str, ...] = ()
    has_seq_scan: bool = False
    has_sort: bool = False

    @field_validator("relations", mode="after")
    @classmethod
    def _read_only_relations(cls, value: Mapping[str, ScanInfo]) -> Mapping[str, ScanInfo]:
        return MappingProxyType(dict(value))

    @field_serializer("relations")
    def _serialize_relations(self, value: Mapping[str, ScanInfo]) -> dict[str, Any]:
        return {table: scan.model_dump() for table, scan in value.items()}

    def count_nodes(self, node_type: str) -> int:
        return sum(1 for nt in self.node_types if nt == node_type)


class RegressionKind(str, Enum):
    """Fixed taxonomy of plan regressions."""
    INDEX_TO_SEQSCAN = "index_to_seqscan"
    INDEX_ONLY_TO_INDEX = "index_only_to_index"
    INDEX_CHANGED = "index_changed"
    TABLE_ACCESS_CHANGED = "table_access_changed"
    JOIN_TYPE_CHANGED = "join_type_changed"
    SORT_ADDED = "sort_added"


class PlanRegression(BaseModel):
    """
    A detected change in how a query executes between baseline and now.

    Relation-level kinds carry table and scan fields; join and sort
    regressions leave them empty.
    """

    model_config = ConfigDict(frozen=True)

    kind: RegressionKind
    severity: Severity
    message: str
    table: str | None = None
    old_scan: str = ""
    new_scan: str = ""
    index_name: str = ""
    index_cond: str = ""
    recommendations: tuple[str, ...] = ()

    @property
    def is_critical(self) -> bool:
        return self.severity is Severity.CRITICAL


class WarningKind(str, Enum):
    """Baseline-independent plan smells."""
    SEQ_SCAN_DETECTED = "sequential_scan_detected"
    MULTIPLE_SEQ_SCANS = "multiple_sequential_scans"
    MULTIPLE_SORTS = "multiple_sorts"
    NESTED_LOOP_WITH_SEQSCAN = "nested_loop_with_seqscan"


class PlanWarning(BaseModel):
    """A smell found in a single plan, with a one-line fix and rationale."""

    model_config = ConfigDict(frozen=True)

    kind: WarningKind
    severity: Severity
    message: str
    table: str | None = None
    suggestion: str = ""
    details: str = ""


class PlanCostInfo(BaseModel):
    """
    Cost figures used only to recognise trivially cheap plans.

    None means the figure is unavailable (e.g. EXPLAIN without BUFFERS).
    """

    model_config = ConfigDict(frozen=True)

    total_cost: float | None = None
    total_buffers: int | None = Field(
        default=None,
        description="Shared hit + shared read blocks (8KB pages)",
    )
