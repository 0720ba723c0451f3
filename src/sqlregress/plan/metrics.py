"""
Root-node metrics and planner row-estimate analysis.

Because EXPLAIN ANALYZE provides actual rows per node, comparing them with
the planner's estimates shows where statistics have drifted. Buffer
counters exist only with EXPLAIN (BUFFERS); they are None otherwise, never
zero-filled, so "unavailable" stays distinguishable from "no I/O".
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from sqlregress.parser.config import ParserConfig
from sqlregress.parser.parser import PlanSource, parse_explain
from sqlregress.plan.models import PlanCostInfo


@dataclass(frozen=True)
class PlanMetrics:
    """Performance figures read from the root plan node."""

    total_cost: float | None = None
    execution_time_ms: float | None = None
    planning_time_ms: float | None = None
    actual_rows: float | None = None

    shared_hit_blocks: int | None = None
    shared_read_blocks: int | None = None
    local_hit_blocks: int | None = None
    local_read_blocks: int | None = None
    temp_read_blocks: int | None = None
    temp_written_blocks: int | None = None
    io_read_time_ms: float | None = None
    io_write_time_ms: float | None = None

    @property
    def total_buffers(self) -> int | None:
        """Shared hit + shared read blocks, None without BUFFERS data."""
        if self.shared_hit_blocks is None and self.shared_read_blocks is None:
            return None
        return (self.shared_hit_blocks or 0) + (self.shared_read_blocks or 0)

    def cost_info(self) -> PlanCostInfo:
        return PlanCostInfo(total_cost=self.total_cost, total_buffers=self.total_buffers)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_cost": self.total_cost,
            "execution_time_ms": self.execution_time_ms,
            "planning_time_ms": self.planning_time_ms,
            "actual_rows": self.actual_rows,
            "shared_hit_blocks": self.shared_hit_blocks,
            "shared_read_blocks": self.shared_read_blocks,
            "local_hit_blocks": self.local_hit_blocks,
            "local_read_blocks": self.local_read_blocks,
            "temp_read_blocks": self.temp_read_blocks,
            "temp_written_blocks": self.temp_written_blocks,
            "total_buffers": self.total_buffers,
            "io_read_time_ms": self.io_read_time_ms,
            "io_write_time_ms": self.io_write_time_ms,
        }


def extract_metrics(source: PlanSource, config: ParserConfig | None = None) -> PlanMetrics:
    """Read cost, timing and buffer figures from the root plan node."""
    explain = parse_explain(source, config)
    root = explain.plan
    return PlanMetrics(
        total_cost=root.total_cost,
        execution_time_ms=explain.execution_time,
        planning_time_ms=explain.planning_time,
        actual_rows=root.actual_rows,
        shared_hit_blocks=root.shared_hit_blocks,
        shared_read_blocks=root.shared_read_blocks,
        local_hit_blocks=root.local_hit_blocks,
        local_read_blocks=root.local_read_blocks,
        temp_read_blocks=root.temp_read_blocks,
        temp_written_blocks=root.temp_written_blocks,
        io_read_time_ms=root.io_read_time,
        io_write_time_ms=root.io_write_time,
    )


@dataclass(frozen=True)
class RowEstimate:
    """
    Planner estimate vs actual rows for one node.

    ratio > 1 means the planner underestimated, < 1 overestimated.
    """

    node_type: str
    relation_name: str | None
    plan_rows: float
    actual_rows: float
    actual_loops: int
    ratio: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "node_type": self.node_type,
            "relation_name": self.relation_name,
            "plan_rows": self.plan_rows,
            "actual_rows": self.actual_rows,
            "actual_loops": self.actual_loops,
            "ratio": self.ratio,
        }


@dataclass(frozen=True)
class RowEstimateAnalysis:
    estimates: tuple[RowEstimate, ...] = field(default=())
    worst_underestimate: RowEstimate | None = None
    worst_overestimate: RowEstimate | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "estimates": [e.to_dict() for e in self.estimates],
            "worst_underestimate": (
                self.worst_underestimate.to_dict() if self.worst_underestimate else None
            ),
            "worst_overestimate": (
                self.worst_overestimate.to_dict() if self.worst_overestimate else None
            ),
        }


def compare_row_estimates(
    source: PlanSource,
    config: ParserConfig | None = None,
) -> RowEstimateAnalysis:
    """
    Compare Plan Rows with Actual Rows for every node that executed.

    Nodes without ANALYZE data (or never executed) are skipped. A node
    planned for 0 rows that returned rows gets an infinite ratio.
    """
    explain = parse_explain(source, config)

    estimates: list[RowEstimate] = []
    for node in explain.plan.iter_nodes():
        if not node.actual_loops:
            continue

        plan_rows = node.plan_rows or 0.0
        actual_rows = node.actual_rows or 0.0
        if plan_rows > 0:
            ratio = actual_rows / plan_rows
        elif actual_rows > 0:
            ratio = math.inf
        else:
            ratio = 0.0

        estimates.append(RowEstimate(
            node_type=node.node_type,
            relation_name=node.relation_name,
            plan_rows=plan_rows,
            actual_rows=actual_rows,
            actual_loops=node.actual_loops,
            ratio=ratio,
        ))

    worst_under: RowEstimate | None = None
    worst_over: RowEstimate | None = None
    for est in estimates:
        if est.ratio > 1:
            if worst_under is None or est.ratio > worst_under.ratio:
                worst_under = est
        elif 0 < est.ratio < 1:
            if worst_over is None or est.ratio < worst_over.ratio:
                worst_over = est

    return RowEstimateAnalysis(
        estimates=tuple(estimates),
        worst_underestimate=worst_under,
        worst_overestimate=worst_over,
    )
