"""Tests for positional and greedy unordered row matching."""

from __future__ import annotations

import pytest

from sqlregress.resultset.matcher import compare_in_order, match_unordered


class TestCompareInOrder:
    """Test positional comparison."""

    def test_all_equal(self) -> None:
        equal, mismatches = compare_in_order([(1,), (2,)], [(1.0,), (2,)])
        assert equal
        assert mismatches == []

    def test_reports_mismatch_positions(self) -> None:
        equal, mismatches = compare_in_order([(1,), (2,), (3,)], [(1,), (9,), (8,)])
        assert not equal
        assert mismatches == [1, 2]

    def test_empty(self) -> None:
        assert compare_in_order([], []) == (True, [])

    def test_length_mismatch_rejected(self) -> None:
        with pytest.raises(ValueError):
            compare_in_order([(1,)], [])


class TestMatchUnordered:
    """Test greedy unordered matching."""

    def test_permutation_fully_matched(self) -> None:
        match = match_unordered([(1,), (2,), (3,)], [(3,), (1,), (2,)])
        assert match.complete
        assert match.matched_expected == [0, 1, 2]
        assert match.matched_actual == [1, 2, 0]

    def test_binds_earliest_unused_actual(self) -> None:
        match = match_unordered([("a",), ("a",)], [("a",), ("b",), ("a",)])
        assert match.matched_actual == [0, 2]
        assert match.unmatched_actual == [1]

    def test_duplicates_counted_once(self) -> None:
        match = match_unordered([(1,), (1,)], [(1,)])
        assert match.matched_expected == [0]
        assert match.unmatched_expected == [1]
        assert match.unmatched_actual == []

    def test_partition_is_exact(self) -> None:
        expected = [(1,), (2,), (3,), (4,)]
        actual = [(4,), (5,), (1,)]
        match = match_unordered(expected, actual)

        assert sorted(match.matched_expected + match.unmatched_expected) == list(range(4))
        assert sorted(match.matched_actual + match.unmatched_actual) == list(range(3))
        assert len(match.matched_expected) == len(match.matched_actual)

    def test_tolerance_applies(self) -> None:
        match = match_unordered([(1.0,)], [(1.04,)], tolerance=0.05)
        assert match.complete

    def test_greedy_not_optimal(self) -> None:
        # expected[0] grabs actual[0] though only it could have matched actual[1]
        expected = [(1.0,), (1.2,)]
        actual = [(1.1,), (0.95,)]
        match = match_unordered(expected, actual, tolerance=0.15)
        assert match.matched_expected == [0]
        assert match.unmatched_expected == [1]
        assert match.unmatched_actual == [1]
