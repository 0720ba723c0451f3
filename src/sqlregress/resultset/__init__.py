"""Result-set comparison: value equality, row matching and diff classification."""

from sqlregress.resultset.differ import compare_result_sets
from sqlregress.resultset.matcher import UnorderedMatch, compare_in_order, match_unordered
from sqlregress.resultset.models import (
    DEFAULT_DIFF_CONFIG,
    DiffCategory,
    DiffConfig,
    ResultSet,
    RowDiff,
    StructuredDiff,
)
from sqlregress.resultset.values import rows_equal, values_equal

__all__ = [
    "compare_result_sets",
    "compare_in_order",
    "match_unordered",
    "UnorderedMatch",
    "values_equal",
    "rows_equal",
    "ResultSet",
    "DiffCategory",
    "DiffConfig",
    "DEFAULT_DIFF_CONFIG",
    "RowDiff",
    "StructuredDiff",
]
