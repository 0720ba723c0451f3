"""
Baseline-free plan quality checks.

Flags smells in a single plan signature:
- Sequential scan on one table, or on several
- More than one Sort node
- Nested loop join together with a sequential scan

Why trivial plans are exempt:
A Seq Scan on a tiny table is the correct plan, not a smell. When the
plan's total cost or its buffer usage is known and below the thresholds,
scan and join warnings are suppressed. The multiple-sorts check still
applies.
"""

from __future__ import annotations

import logging
from typing import Iterable

from sqlregress.options import DEFAULT_QUERY_OPTIONS, QueryOptions
from sqlregress.parser.models import NodeType
from sqlregress.plan.models import (
    PlanCostInfo,
    PlanSignature,
    PlanWarning,
    Severity,
    WarningKind,
)

logger = logging.getLogger(__name__)

LOW_COST_THRESHOLD = 10.0
LOW_BUFFER_THRESHOLD = 10  # shared buffers, 8KB pages


def is_trivial_plan(cost: PlanCostInfo | None) -> bool:
    """True when a known total cost or known buffer count is below threshold."""
    if cost is None:
        return False
    low_cost = cost.total_cost is not None and cost.total_cost < LOW_COST_THRESHOLD
    low_buffers = cost.total_buffers is not None and cost.total_buffers < LOW_BUFFER_THRESHOLD
    return low_cost or low_buffers


def analyze_plan_quality(
    signature: PlanSignature,
    options: QueryOptions | None = None,
    ignored_tables: Iterable[str] = (),
    cost: PlanCostInfo | None = None,
) -> list[PlanWarning]:
    """
    Flag quality issues in one plan, independent of any baseline.

    Args:
        signature: Signature of the plan to inspect
        options: Per-query options (no_seqscan_warn disables scan warnings)
        ignored_tables: Relations whose sequential scans are expected
        cost: Cost/buffer figures for trivial-plan suppression

    Returns:
        Warnings in a fixed order: scan, sorts, nested loop
    """
    options = options or DEFAULT_QUERY_OPTIONS
    trivial = is_trivial_plan(cost)
    warnings: list[PlanWarning] = []

    if signature.has_seq_scan and not options.no_seqscan_warn and not trivial:
        warning = _seq_scan_warning(_seq_scan_tables(signature, ignored_tables))
        if warning is not None:
            warnings.append(warning)

    sort_count = signature.count_nodes(NodeType.SORT.value)
    if sort_count > 1:
        warnings.append(PlanWarning(
            kind=WarningKind.MULTIPLE_SORTS,
            severity=Severity.WARNING,
            message=f"Multiple sort operations detected ({sort_count} sorts)",
            suggestion="Consider composite indexes for ORDER BY clauses to avoid sorting",
            details="Multiple sorts can be expensive; indexes can eliminate or reduce sorting",
        ))

    if (
        signature.has_seq_scan
        and NodeType.NESTED_LOOP.value in signature.join_types
        and not trivial
    ):
        warnings.append(PlanWarning(
            kind=WarningKind.NESTED_LOOP_WITH_SEQSCAN,
            severity=Severity.WARNING,
            message="Nested loop join with sequential scan detected",
            suggestion="Add index on join column to avoid repeated sequential scans",
            details=(
                "Nested loops with seq scans can be very slow; "
                "the inner table is scanned repeatedly"
            ),
        ))

    if trivial and signature.has_seq_scan:
        logger.debug("Trivial plan (%s), scan warnings suppressed", cost)

    return warnings


def _seq_scan_tables(signature: PlanSignature, ignored_tables: Iterable[str]) -> list[str]:
    ignored = set(ignored_tables)
    return sorted(
        table for table, scan in signature.relations.items()
        if scan.scan_type == NodeType.SEQ_SCAN and table not in ignored
    )


def _seq_scan_warning(tables: list[str]) -> PlanWarning | None:
    if not tables:
        # every seq scan is on an ignored table
        return None

    if len(tables) == 1:
        table = tables[0]
        return PlanWarning(
            kind=WarningKind.SEQ_SCAN_DETECTED,
            severity=Severity.WARNING,
            table=table,
            message=f"Sequential scan detected on table '{table}'",
            suggestion=(
                "Consider adding an index if this table is large "
                "or this query is frequently executed"
            ),
            details=(
                f"Table '{table}' is being scanned sequentially, "
                "which may be slow on large tables"
            ),
        )

    return PlanWarning(
        kind=WarningKind.MULTIPLE_SEQ_SCANS,
        severity=Severity.WARNING,
        message=f"Multiple sequential scans detected on tables: {', '.join(tables)}",
        suggestion="Review query and consider adding indexes on filtered/joined columns",
        details=f"{len(tables)} tables are being scanned sequentially",
    )
