"""
Tests for cell-level value comparison.

Test philosophy:
- Numbers compare by value regardless of int/float/Decimal representation
- Timestamps compare by instant regardless of zone offset or string form
- Everything else is plain equality, with no cross-type coercion
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from sqlregress.resultset.values import parse_rfc3339, rows_equal, to_number, values_equal


class TestNullHandling:
    """Test None cells."""

    def test_both_none_equal(self) -> None:
        assert values_equal(None, None)

    def test_one_none_unequal(self) -> None:
        assert not values_equal(None, 0)
        assert not values_equal("", None)

    def test_none_ignores_tolerance(self) -> None:
        assert not values_equal(None, 0.0, tolerance=1.0)


class TestNumericComparison:
    """Test numeric equality across representations."""

    @pytest.mark.parametrize(
        ("a", "b"),
        [
            (10, 10.0),
            (10, Decimal("10")),
            (Decimal("2.50"), 2.5),
            (0, -0.0),
        ],
    )
    def test_representations_compare_by_value(self, a: object, b: object) -> None:
        assert values_equal(a, b)
        assert values_equal(b, a)

    def test_exact_when_tolerance_zero(self) -> None:
        assert not values_equal(1.0, 1.0000001)

    def test_within_tolerance(self) -> None:
        assert values_equal(1.0, 1.05, tolerance=0.1)
        assert values_equal(100, 99.95, tolerance=0.1)

    def test_outside_tolerance(self) -> None:
        assert not values_equal(1.0, 1.2, tolerance=0.1)

    def test_tolerance_boundary_inclusive(self) -> None:
        assert values_equal(1.0, 1.5, tolerance=0.5)

    def test_large_integers_compare_exactly(self) -> None:
        big = 2**53
        assert not values_equal(big, big + 1)
        assert values_equal(big + 1, big + 1)

    def test_integers_beyond_float_range(self) -> None:
        huge = 10**400
        assert values_equal(huge, huge)
        assert not values_equal(huge, huge + 1)
        assert values_equal(huge, huge + 1, tolerance=1.0)
        assert not values_equal(huge, huge + 2, tolerance=1.0)

    def test_overflowing_values_across_representations(self) -> None:
        huge = 10**400
        assert values_equal(huge, Decimal("1e400"))
        assert not values_equal(Decimal("1e400"), Decimal("2e400"))
        assert not values_equal(huge, float("inf"))
        assert not values_equal(float("nan"), huge, tolerance=1.0)
        assert not values_equal(huge, 1.5)

    def test_nan_never_equal(self) -> None:
        assert not values_equal(float("nan"), float("nan"))
        assert not values_equal(float("nan"), float("nan"), tolerance=1.0)

    def test_numeric_strings_are_not_numbers(self) -> None:
        assert not values_equal("10", 10)
        assert not values_equal("007", "7")
        assert to_number("10") is None

    def test_booleans_are_not_numbers(self) -> None:
        assert to_number(True) is None
        assert not values_equal(True, 1)
        assert not values_equal(0, False)

    def test_booleans_equal_themselves(self) -> None:
        assert values_equal(True, True)
        assert not values_equal(True, False)


class TestTimestampComparison:
    """Test instant equality."""

    def test_same_instant_different_offsets(self) -> None:
        assert values_equal("2024-01-01T00:00:00Z", "2024-01-01T01:00:00+01:00")

    def test_datetime_vs_string(self) -> None:
        dt = datetime(2024, 3, 15, 12, 30, tzinfo=timezone.utc)
        assert values_equal(dt, "2024-03-15T12:30:00Z")
        assert values_equal("2024-03-15T12:30:00Z", dt)

    def test_naive_datetime_taken_as_utc(self) -> None:
        naive = datetime(2024, 3, 15, 12, 30)
        aware = datetime(2024, 3, 15, 12, 30, tzinfo=timezone.utc)
        assert values_equal(naive, aware)

    def test_fractional_seconds(self) -> None:
        assert values_equal("2024-01-01T00:00:00.5Z", "2024-01-01T00:00:00.500000Z")
        assert not values_equal("2024-01-01T00:00:00.5Z", "2024-01-01T00:00:00Z")

    def test_tolerance_does_not_apply_to_timestamps(self) -> None:
        a = datetime(2024, 1, 1, tzinfo=timezone.utc)
        b = a + timedelta(seconds=1)
        assert not values_equal(a, b, tolerance=10.0)

    def test_non_timestamp_strings_compare_as_text(self) -> None:
        assert values_equal("hello", "hello")
        assert not values_equal("2024-01-01", "2024-01-01T00:00:00Z")

    def test_parse_rfc3339(self) -> None:
        parsed = parse_rfc3339("2024-06-01T10:00:00.123456789-05:00")
        assert parsed is not None
        assert parsed.microsecond == 123456
        assert parsed.utcoffset() == timedelta(hours=-5)

    def test_parse_rfc3339_rejects_garbage(self) -> None:
        assert parse_rfc3339("yesterday") is None
        assert parse_rfc3339("2024-13-01T00:00:00Z") is None


class TestStructuralComparison:
    """Test the fallback equality."""

    def test_lists(self) -> None:
        assert values_equal([1, 2], [1, 2])
        assert not values_equal([1, 2], [2, 1])

    def test_mixed_types_unequal(self) -> None:
        assert not values_equal("a", 1)
        assert not values_equal(b"a", "a")


class TestSymmetry:
    """values_equal(a, b) == values_equal(b, a) for any pair."""

    SAMPLES = [
        None,
        0,
        1,
        1.0,
        Decimal("1.0"),
        True,
        "1",
        "2024-01-01T00:00:00Z",
        datetime(2024, 1, 1, tzinfo=timezone.utc),
        float("nan"),
        [1],
    ]

    @pytest.mark.parametrize("tolerance", [0.0, 0.5])
    def test_symmetric(self, tolerance: float) -> None:
        for a in self.SAMPLES:
            for b in self.SAMPLES:
                assert values_equal(a, b, tolerance) == values_equal(b, a, tolerance), (a, b)

    def test_tolerance_is_monotonic(self) -> None:
        pairs = [(1.0, 1.3), (10, 10.05), (Decimal("5"), 5.4)]
        tolerances = [0.0, 0.01, 0.1, 0.5, 1.0]
        for a, b in pairs:
            results = [values_equal(a, b, t) for t in tolerances]
            # once equal, stays equal as tolerance grows
            assert results == sorted(results)


class TestRowsEqual:
    """Test row-level equality."""

    def test_equal_rows(self) -> None:
        assert rows_equal((1, "a", None), (1.0, "a", None))

    def test_width_mismatch(self) -> None:
        assert not rows_equal((1, 2), (1, 2, 3))

    def test_one_cell_differs(self) -> None:
        assert not rows_equal((1, "a"), (1, "b"))
