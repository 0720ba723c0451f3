"""
Type-aware equality between two result cells.

Different drivers and runs may hand back the same number as int, float or
Decimal, and the same instant as a datetime or an RFC 3339 string.
Comparing raw representations would manufacture false diffs, so cells are
compared by meaning:

1. Both None -> equal; exactly one None -> unequal.
2. Both numeric -> numeric comparison (tolerance applies).
3. Both timestamps -> instant comparison (tolerance never applies).
4. Otherwise -> structural equality.
"""

from __future__ import annotations

import math
import re
from datetime import datetime, timezone
from decimal import Decimal
from fractions import Fraction
from numbers import Real
from typing import Any

_RFC3339 = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<frac>\d+))?"
    r"(?P<tz>[Zz]|[+-]\d{2}:\d{2})$"
)


def values_equal(a: Any, b: Any, tolerance: float = 0.0) -> bool:
    """
    Compare two cells.

    Args:
        a: Expected cell value
        b: Actual cell value
        tolerance: Absolute numeric tolerance, 0 means exact

    Returns:
        True when the cells represent the same value.

    Example:
        >>> values_equal(10, 10.0)
        True
        >>> values_equal(1.0, 1.05, tolerance=0.1)
        True
        >>> values_equal("2024-01-01T00:00:00Z", "2024-01-01T01:00:00+01:00")
        True
    """
    if a is None and b is None:
        return True
    if a is None or b is None:
        return False

    a_num = to_number(a)
    if a_num is not None:
        b_num = to_number(b)
        if b_num is not None:
            return _numbers_equal(a_num, b_num, tolerance)

    a_time = to_instant(a)
    if a_time is not None:
        b_time = to_instant(b)
        if b_time is not None:
            return a_time == b_time

    return _structural_equal(a, b)


def rows_equal(expected: tuple[Any, ...], actual: tuple[Any, ...], tolerance: float = 0.0) -> bool:
    """Cell-by-cell equality; rows of different width are never equal."""
    if len(expected) != len(actual):
        return False
    return all(values_equal(e, a, tolerance) for e, a in zip(expected, actual))


def to_number(value: Any) -> Real | Decimal | None:
    """
    The cell itself when it is a number, else None.

    Booleans and strings are not numbers here: a text column holding "007"
    must not match one holding "7".
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (Decimal, Real)):
        return value
    return None


def _numbers_equal(a: Real | Decimal, b: Real | Decimal, tolerance: float) -> bool:
    if isinstance(a, int) and isinstance(b, int):
        # exact: floats collide past 2**53 and overflow past ~1e308
        return abs(a - b) <= tolerance

    a_float, b_float = _to_float(a), _to_float(b)
    if a_float is None or b_float is None:
        return _exact_equal(a, b, tolerance)
    if tolerance > 0:
        return abs(a_float - b_float) <= tolerance
    return a_float == b_float


def _to_float(value: Real | Decimal) -> float | None:
    """Float view of a number, or None when a finite value does not fit."""
    if isinstance(value, Decimal):
        if value.is_nan():
            return math.nan
        if value.is_infinite():
            return float(value)
    try:
        result = float(value)
    except OverflowError:
        return None
    if math.isinf(result) and isinstance(value, Decimal):
        return None
    return result


def _exact_equal(a: Real | Decimal, b: Real | Decimal, tolerance: float) -> bool:
    try:
        a_exact, b_exact = Fraction(a), Fraction(b)
    except (OverflowError, ValueError, TypeError):
        # an infinity or NaN never equals a finite value too large for a float
        return False
    return abs(a_exact - b_exact) <= Fraction(tolerance)


def to_instant(value: Any) -> datetime | None:
    """
    Timezone-aware instant for a datetime or RFC 3339 string cell.

    Naive datetimes are taken as UTC so they stay comparable with aware ones.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    if isinstance(value, str):
        return parse_rfc3339(value)
    return None


def parse_rfc3339(text: str) -> datetime | None:
    """Parse an RFC 3339 timestamp, with or without fractional seconds."""
    match = _RFC3339.match(text)
    if match is None:
        return None

    base = match.group("base").replace("t", "T")
    frac = match.group("frac")
    tz = match.group("tz")
    if tz in ("Z", "z"):
        tz = "+00:00"

    # fromisoformat only accepts microsecond precision.
    if frac:
        base += "." + frac[:6].ljust(6, "0")

    try:
        return datetime.fromisoformat(base + tz)
    except ValueError:
        return None


def _structural_equal(a: Any, b: Any) -> bool:
    # True == 1 in Python, but a boolean cell never equals an integer cell.
    if isinstance(a, bool) != isinstance(b, bool):
        return False
    try:
        return bool(a == b)
    except (TypeError, ValueError):
        return False
