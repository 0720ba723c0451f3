"""
Per-query options.

Queries carry a comma-separated option list in their `regresql:` metadata
comment, e.g.:

    -- name: orders-by-customer
    -- regresql: noseqscanwarn, difffloattolerance:0.01

Tokens are case-insensitive; unknown tokens are ignored.
"""

from __future__ import annotations

import logging
import math

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

_TOLERANCE_PREFIX = "difffloattolerance:"


class QueryOptions(BaseModel):
    """
    Options attached to a single query.

    Attributes:
        no_test: Skip result comparison for this query
        no_baseline: Skip cost baselining for this query
        no_seqscan_warn: Suppress sequential scan quality warnings
        diff_float_tolerance: Per-query numeric tolerance (0 = use global)
    """

    model_config = ConfigDict(frozen=True)

    no_test: bool = False
    no_baseline: bool = False
    no_seqscan_warn: bool = False
    diff_float_tolerance: float = Field(default=0.0, ge=0)


DEFAULT_QUERY_OPTIONS = QueryOptions()


def parse_query_options(metadata: str | None) -> QueryOptions:
    """
    Parse the value of a `regresql:` metadata entry.

    Example:
        >>> parse_query_options("NoTest, DiffFloatTolerance:0.5").diff_float_tolerance
        0.5
    """
    if not metadata:
        return DEFAULT_QUERY_OPTIONS

    flags: dict[str, bool | float] = {}
    for part in metadata.split(","):
        token = part.strip().lower()
        if token == "notest":
            flags["no_test"] = True
        elif token == "nobaseline":
            flags["no_baseline"] = True
        elif token == "noseqscanwarn":
            flags["no_seqscan_warn"] = True
        elif token.startswith(_TOLERANCE_PREFIX):
            raw = token[len(_TOLERANCE_PREFIX):].strip()
            try:
                tolerance = float(raw)
            except ValueError:
                logger.warning("Ignoring unparseable float tolerance %r", raw)
                continue
            if not math.isfinite(tolerance) or tolerance < 0:
                logger.warning("Ignoring invalid float tolerance %r", raw)
                continue
            flags["diff_float_tolerance"] = tolerance

    return QueryOptions(**flags)
