"""
Plan regression detection between a baseline and a current signature.

Output order is deterministic:
1. Per-relation scan comparisons, sorted by relation name
2. One join strategy comparison
3. One sort-added comparison

Only relations present in both signatures are compared; a relation dropped
from the current plan is not a regression signal here.

Per relation, first matching rule wins:
- index-family scan -> Seq Scan          index_to_seqscan      critical
- Index Only Scan -> Index Scan          index_only_to_index   warning
- index-family, different index names    index_changed         info
- any other scan type change             table_access_changed  warning
"""

from __future__ import annotations

import logging
from collections import Counter

from sqlregress.parser.models import NodeType
from sqlregress.plan.models import (
    PlanRegression,
    PlanSignature,
    RegressionKind,
    ScanInfo,
    Severity,
)
from sqlregress.plan.signature import extract_simple_column, is_index_scan

logger = logging.getLogger(__name__)


def detect_plan_regressions(
    baseline: PlanSignature,
    current: PlanSignature,
) -> list[PlanRegression]:
    """
    Compare two signatures and list typed, severity-ranked regressions.

    Args:
        baseline: Signature stored with the baseline
        current: Signature of the plan just captured

    Returns:
        Regressions in deterministic order; empty when nothing regressed
    """
    regressions: list[PlanRegression] = []

    for table in sorted(baseline.relations):
        current_scan = current.relations.get(table)
        if current_scan is None:
            continue
        regression = _compare_scan_methods(table, baseline.relations[table], current_scan)
        if regression is not None:
            regressions.append(regression)

    join_regression = _compare_join_types(baseline.join_types, current.join_types)
    if join_regression is not None:
        regressions.append(join_regression)

    if not baseline.has_sort and current.has_sort:
        regressions.append(PlanRegression(
            kind=RegressionKind.SORT_ADDED,
            severity=Severity.WARNING,
            message="Sort operation added to query plan",
            recommendations=(
                "-- Sort operation may indicate missing index for ORDER BY",
                "-- Review query ORDER BY clause and consider adding appropriate index",
            ),
        ))

    if regressions:
        counts = Counter(r.kind.value for r in regressions)
        logger.debug("Detected %d plan regressions: %s", len(regressions), dict(counts))

    return regressions


def has_critical_regression(regressions: list[PlanRegression]) -> bool:
    return any(r.is_critical for r in regressions)


def _compare_scan_methods(
    table: str,
    baseline: ScanInfo,
    current: ScanInfo,
) -> PlanRegression | None:
    old_scan = baseline.describe()
    new_scan = current.describe()

    if is_index_scan(baseline.scan_type) and current.scan_type == NodeType.SEQ_SCAN:
        return PlanRegression(
            kind=RegressionKind.INDEX_TO_SEQSCAN,
            severity=Severity.CRITICAL,
            table=table,
            old_scan=old_scan,
            new_scan=new_scan,
            index_name=baseline.index_name,
            index_cond=baseline.index_cond,
            message=f"Table '{table}' changed from {baseline.scan_type} to Seq Scan",
            recommendations=_index_regression_recommendations(table, baseline),
        )

    if (
        baseline.scan_type == NodeType.INDEX_ONLY_SCAN
        and current.scan_type == NodeType.INDEX_SCAN
    ):
        return PlanRegression(
            kind=RegressionKind.INDEX_ONLY_TO_INDEX,
            severity=Severity.WARNING,
            table=table,
            old_scan=old_scan,
            new_scan=new_scan,
            index_name=baseline.index_name,
            message=f"Table '{table}' changed from Index Only Scan to Index Scan",
            recommendations=(
                "-- Index Only Scan degraded to Index Scan",
                "-- This may indicate index bloat or visibility map issues",
                f"VACUUM ANALYZE {table};",
                "-- Consider REINDEX if bloat is significant:",
                f"-- REINDEX INDEX {baseline.index_name};",
            ),
        )

    if (
        is_index_scan(baseline.scan_type)
        and is_index_scan(current.scan_type)
        and baseline.index_name
        and current.index_name
        and baseline.index_name != current.index_name
    ):
        return PlanRegression(
            kind=RegressionKind.INDEX_CHANGED,
            severity=Severity.INFO,
            table=table,
            old_scan=old_scan,
            new_scan=new_scan,
            index_name=baseline.index_name,
            message=(
                f"Table '{table}' using different index: "
                f"{baseline.index_name} → {current.index_name}"
            ),
            recommendations=(
                "-- Optimizer chose a different index",
                "-- This might be better or worse depending on data distribution",
                f"-- Old index: {baseline.index_name}",
                f"-- New index: {current.index_name}",
                f"ANALYZE {table};",
            ),
        )

    if baseline.scan_type != current.scan_type:
        return PlanRegression(
            kind=RegressionKind.TABLE_ACCESS_CHANGED,
            severity=Severity.WARNING,
            table=table,
            old_scan=old_scan,
            new_scan=new_scan,
            message=(
                f"Table '{table}' access method changed: "
                f"{baseline.scan_type} → {current.scan_type}"
            ),
            recommendations=(
                f"-- Table access method changed from {baseline.scan_type} to {current.scan_type}",
                f"ANALYZE {table};",
            ),
        )

    return None


def _compare_join_types(
    baseline: tuple[str, ...],
    current: tuple[str, ...],
) -> PlanRegression | None:
    if tuple(baseline) == tuple(current):
        return None
    if not baseline and not current:
        return None

    return PlanRegression(
        kind=RegressionKind.JOIN_TYPE_CHANGED,
        severity=Severity.INFO,
        message=f"Join strategy changed: [{', '.join(baseline)}] → [{', '.join(current)}]",
        recommendations=(
            "-- Join strategy changed - this may be better or worse",
            "-- Run ANALYZE on joined tables to ensure statistics are up to date",
        ),
    )


def _index_regression_recommendations(table: str, baseline: ScanInfo) -> tuple[str, ...]:
    """Step-by-step remediation for a lost index scan."""
    recs = [
        "-- Step 1: Check if index exists",
        f"SELECT indexname, indexdef FROM pg_indexes WHERE indexname = '{baseline.index_name}';",
        "",
        "-- Step 2: Check table statistics freshness",
        "SELECT schemaname, tablename, last_analyze, last_autoanalyze, n_live_tup",
        f"FROM pg_stat_user_tables WHERE tablename = '{table}';",
        "",
        "-- Step 3: Update statistics (always safe)",
        f"ANALYZE {table};",
        "",
    ]

    column = extract_simple_column(baseline.index_cond)
    if column:
        recs += [
            "-- Step 4: If index is missing, recreate it",
            f"CREATE INDEX {baseline.index_name} ON {table}({column});",
        ]
    else:
        recs += [
            "-- Step 4: If index is missing, check the original definition",
            f"-- Index condition was: {baseline.index_cond}",
            "-- Recreate the index based on the original definition from pg_indexes",
        ]

    return tuple(recs)
