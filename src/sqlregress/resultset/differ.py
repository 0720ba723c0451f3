"""
Semantic comparison of two result sets.

Classification rules, first applicable wins:
1. Column lists differ (name, order or count) -> VALUES, schema mismatch
2. Same row count, rows equal in order -> IDENTICAL
3. Same row count, rows equal ignoring order -> ORDERING,
   otherwise VALUES with matching/modified tallies
4. Row counts differ -> ROW_COUNT when only one side has unmatched rows,
   MULTIPLE when both do

Usage:
    from sqlregress.resultset import ResultSet, compare_result_sets

    diff = compare_result_sets(expected, actual)
    if not diff.identical:
        print(diff.category.value, diff.added_rows, diff.removed_rows)
"""

from __future__ import annotations

import logging
from typing import Sequence

from sqlregress.resultset.matcher import compare_in_order, match_unordered
from sqlregress.resultset.models import (
    DEFAULT_DIFF_CONFIG,
    DiffCategory,
    DiffConfig,
    ResultSet,
    Row,
    RowDiff,
    StructuredDiff,
)

logger = logging.getLogger(__name__)


def compare_result_sets(
    expected: ResultSet,
    actual: ResultSet,
    config: DiffConfig | None = None,
) -> StructuredDiff:
    """
    Classify the difference between two result sets.

    Args:
        expected: Result set recorded earlier
        actual: Result set from the current run
        config: Tolerance and sample bounds, DEFAULT_DIFF_CONFIG if None

    Returns:
        StructuredDiff with exactly one category assigned
    """
    config = config or DEFAULT_DIFF_CONFIG
    diff = _classify(expected, actual, config)
    logger.debug(
        "Result diff: %s (expected=%d, actual=%d, matching=%d)",
        diff.category.value,
        diff.expected_rows,
        diff.actual_rows,
        diff.matching_rows,
    )
    return diff


def _classify(expected: ResultSet, actual: ResultSet, config: DiffConfig) -> StructuredDiff:
    tolerance = config.float_tolerance
    expected_rows = len(expected.rows)
    actual_rows = len(actual.rows)

    if tuple(expected.columns) != tuple(actual.columns):
        return StructuredDiff(
            category=DiffCategory.VALUES,
            expected_rows=expected_rows,
            actual_rows=actual_rows,
            columns=tuple(expected.columns),
            schema_mismatch=True,
        )

    if expected_rows == actual_rows:
        all_equal, _ = compare_in_order(expected.rows, actual.rows, tolerance)
        if all_equal:
            return StructuredDiff(
                category=DiffCategory.IDENTICAL,
                expected_rows=expected_rows,
                actual_rows=actual_rows,
                columns=tuple(expected.columns),
                matching_rows=expected_rows,
            )

        match = match_unordered(expected.rows, actual.rows, tolerance)
        if match.complete:
            return StructuredDiff(
                category=DiffCategory.ORDERING,
                expected_rows=expected_rows,
                actual_rows=actual_rows,
                columns=tuple(expected.columns),
                matching_rows=expected_rows,
            )

        return StructuredDiff(
            category=DiffCategory.VALUES,
            expected_rows=expected_rows,
            actual_rows=actual_rows,
            columns=tuple(expected.columns),
            matching_rows=len(match.matched_expected),
            modified_rows=len(match.unmatched_expected),
            modified_samples=_collect_modified_samples(
                expected.rows,
                actual.rows,
                match.unmatched_expected,
                match.unmatched_actual,
                config.max_samples,
            ),
        )

    match = match_unordered(expected.rows, actual.rows, tolerance)
    added = len(match.unmatched_actual)
    removed = len(match.unmatched_expected)

    return StructuredDiff(
        category=DiffCategory.MULTIPLE if added and removed else DiffCategory.ROW_COUNT,
        expected_rows=expected_rows,
        actual_rows=actual_rows,
        columns=tuple(expected.columns),
        matching_rows=len(match.matched_expected),
        added_rows=added,
        removed_rows=removed,
        added_samples=_collect_samples(actual.rows, match.unmatched_actual, config.max_samples),
        removed_samples=_collect_samples(expected.rows, match.unmatched_expected, config.max_samples),
    )


def _collect_samples(rows: Sequence[Row], indices: list[int], max_samples: int) -> tuple[Row, ...]:
    return tuple(rows[i] for i in indices[:max_samples])


def _collect_modified_samples(
    expected: Sequence[Row],
    actual: Sequence[Row],
    unmatched_expected: list[int],
    unmatched_actual: list[int],
    max_samples: int,
) -> tuple[RowDiff, ...]:
    """Pair unmatched rows by position, truncated to the shorter side."""
    pairs = zip(unmatched_expected, unmatched_actual)
    return tuple(
        RowDiff(expected_row=expected[ei], actual_row=actual[ai])
        for ei, ai in list(pairs)[:max_samples]
    )
