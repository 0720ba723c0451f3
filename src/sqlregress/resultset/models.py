"""
Data models for result-set comparison.

- ResultSet: captured once per query execution, never mutated by comparison
- DiffConfig: caller-supplied comparison knobs
- StructuredDiff / RowDiff: the outcome of one comparison, read-only
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence

from pydantic import BaseModel, ConfigDict, Field

Row = tuple[Any, ...]


class DiffCategory(str, Enum):
    """
    Classification of a result-set comparison. Exactly one applies.

    IDENTICAL: same columns, same rows, same order
    ORDERING: same rows, different order (still a difference)
    VALUES: schema mismatch, or equal row counts with differing rows
    ROW_COUNT: row counts differ and only one side has unmatched rows
    MULTIPLE: row counts differ and both sides have unmatched rows
    """
    IDENTICAL = "identical"
    ORDERING = "ordering"
    VALUES = "values"
    ROW_COUNT = "row_count"
    MULTIPLE = "multiple"


@dataclass(frozen=True)
class ResultSet:
    """
    Column names and rows returned by one query execution.

    Rows are stored as tuples so a ResultSet can be shared between
    concurrent comparisons without copying.
    """

    columns: Sequence[str]
    rows: Sequence[Sequence[Any]] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "columns", tuple(self.columns))
        object.__setattr__(self, "rows", tuple(tuple(row) for row in self.rows))

    def __len__(self) -> int:
        return len(self.rows)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ResultSet:
        """Build from the {"columns": [...], "rows": [[...], ...]} layout."""
        return cls(data.get("columns") or [], data.get("rows") or [])

    def to_dict(self) -> dict[str, Any]:
        return {
            "columns": list(self.columns),
            "rows": [list(row) for row in self.rows],
        }


class DiffConfig(BaseModel):
    """
    Knobs for a result-set comparison.

    Attributes:
        float_tolerance: Absolute tolerance for numeric cells (0 = exact).
        max_samples: Upper bound on each sample list in the diff.
    """

    model_config = ConfigDict(frozen=True)

    float_tolerance: float = Field(
        default=0.0,
        ge=0,
        description="Absolute tolerance for numeric comparison, 0 means exact",
    )

    max_samples: int = Field(
        default=5,
        gt=0,
        description="Maximum number of sample rows kept per side",
    )


DEFAULT_DIFF_CONFIG = DiffConfig()


@dataclass(frozen=True)
class RowDiff:
    """An (expected, actual) pair of rows that did not match."""

    expected_row: Row
    actual_row: Row

    def to_dict(self) -> dict[str, Any]:
        return {
            "expected_row": list(self.expected_row),
            "actual_row": list(self.actual_row),
        }


@dataclass(frozen=True)
class StructuredDiff:
    """
    Result of comparing two result sets.

    Invariants:
        matching_rows + modified_rows + removed_rows <= expected_rows
        matching_rows + added_rows <= actual_rows
        identical is True iff category is IDENTICAL

    A schema mismatch (differing column lists) is reported as VALUES with
    schema_mismatch set and no row tallies.
    """

    category: DiffCategory
    expected_rows: int
    actual_rows: int
    columns: tuple[str, ...]

    matching_rows: int = 0
    added_rows: int = 0
    removed_rows: int = 0
    modified_rows: int = 0

    added_samples: tuple[Row, ...] = ()
    removed_samples: tuple[Row, ...] = ()
    modified_samples: tuple[RowDiff, ...] = ()

    schema_mismatch: bool = False

    @property
    def identical(self) -> bool:
        return self.category is DiffCategory.IDENTICAL

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON output."""
        return {
            "category": self.category.value,
            "identical": self.identical,
            "schema_mismatch": self.schema_mismatch,
            "expected_rows": self.expected_rows,
            "actual_rows": self.actual_rows,
            "matching_rows": self.matching_rows,
            "added_rows": self.added_rows,
            "removed_rows": self.removed_rows,
            "modified_rows": self.modified_rows,
            "added_samples": [list(r) for r in self.added_samples],
            "removed_samples": [list(r) for r in self.removed_samples],
            "modified_samples": [s.to_dict() for s in self.modified_samples],
            "columns": list(self.columns),
        }
