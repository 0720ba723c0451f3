"""
Positional and unordered matching between two row sequences.

The unordered matcher is a greedy O(n*m) approximation, not a minimum-cost
bipartite matching. For each expected row (in order) it binds the first
unused actual row (in order) that is equal cell by cell. With a numeric
tolerance, equality is not transitive, so the greedy choice can leave rows
unmatched that an optimal matching would pair; the tie-breaking is kept
stable so samples are reproducible across runs.
"""

from __future__ import annotations

from typing import NamedTuple, Sequence

from sqlregress.resultset.models import Row
from sqlregress.resultset.values import rows_equal


class UnorderedMatch(NamedTuple):
    """Index lists produced by match_unordered, each in ascending scan order."""

    matched_expected: list[int]
    matched_actual: list[int]
    unmatched_expected: list[int]
    unmatched_actual: list[int]

    @property
    def complete(self) -> bool:
        """True when every row on both sides found a partner."""
        return not self.unmatched_expected and not self.unmatched_actual


def compare_in_order(
    expected: Sequence[Row],
    actual: Sequence[Row],
    tolerance: float = 0.0,
) -> tuple[bool, list[int]]:
    """
    Compare rows position by position.

    Both sequences must have the same length.

    Returns:
        (all_equal, mismatch_indices)
    """
    if len(expected) != len(actual):
        raise ValueError(
            f"compare_in_order needs equal lengths, got {len(expected)} and {len(actual)}"
        )

    mismatches = [
        i for i, (exp_row, act_row) in enumerate(zip(expected, actual))
        if not rows_equal(exp_row, act_row, tolerance)
    ]
    return not mismatches, mismatches


def match_unordered(
    expected: Sequence[Row],
    actual: Sequence[Row],
    tolerance: float = 0.0,
) -> UnorderedMatch:
    """
    Greedily pair expected rows with equal actual rows, ignoring order.

    Each expected row binds to the earliest not-yet-used equal actual row.
    Actual rows still unused at the end are unmatched.
    """
    used = [False] * len(actual)
    matched_expected: list[int] = []
    matched_actual: list[int] = []
    unmatched_expected: list[int] = []

    for ei, exp_row in enumerate(expected):
        for ai, act_row in enumerate(actual):
            if used[ai]:
                continue
            if rows_equal(exp_row, act_row, tolerance):
                used[ai] = True
                matched_expected.append(ei)
                matched_actual.append(ai)
                break
        else:
            unmatched_expected.append(ei)

    unmatched_actual = [ai for ai, was_used in enumerate(used) if not was_used]

    return UnorderedMatch(
        matched_expected=matched_expected,
        matched_actual=matched_actual,
        unmatched_expected=unmatched_expected,
        unmatched_actual=unmatched_actual,
    )
