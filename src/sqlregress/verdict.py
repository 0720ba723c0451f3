"""
Pass/fail verdicts for a query plan against its baseline.

Combines three signals:
- Cost (or, with EXPLAIN ANALYZE BUFFERS data on both sides, buffer) delta
  against a percentage threshold
- Typed plan regressions when the baseline carries a signature
- Baseline-free quality warnings on the current plan

A critical regression fails the verdict even when the number is within
threshold: planner costs on synthetic data can mislead, a change of scan
method cannot.

Usage:
    from sqlregress.verdict import Baseline, assemble_verdict

    baseline = Baseline(total_cost=120.5, plan_signature=stored_signature)
    verdict = assemble_verdict(baseline, 131.0, current_signature, threshold_percent=10)
    if not verdict.passed:
        print(verdict.percent_increase, [r.kind.value for r in verdict.regressions])
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field

from sqlregress.options import QueryOptions
from sqlregress.parser.config import ParserConfig
from sqlregress.parser.parser import PlanSource, parse_explain
from sqlregress.plan.metrics import extract_metrics
from sqlregress.plan.models import PlanCostInfo, PlanRegression, PlanSignature, PlanWarning
from sqlregress.plan.quality import analyze_plan_quality
from sqlregress.plan.regression import detect_plan_regressions, has_critical_regression
from sqlregress.plan.signature import extract_signature, has_plan_changed

logger = logging.getLogger(__name__)

DEFAULT_COST_THRESHOLD_PERCENT = 10.0

LIKELY_CAUSE_STATISTICS = (
    "Data distribution changed or outdated statistics. Try: ANALYZE table_name;"
)


class VerdictMetric(str, Enum):
    """Which figure gated the verdict."""
    COST = "cost"
    BUFFERS = "buffers"


def compare_cost(
    actual: float,
    baseline: float,
    threshold_percent: float,
) -> tuple[bool, float]:
    """
    Check a cost against its baseline.

    Returns:
        (ok, percent_increase). A zero baseline is ok only for a zero
        actual, and reports 0% to avoid dividing by zero. At the threshold
        edge the percentage is clamped to agree with ok: never above the
        threshold when ok, always above it when not.

    Example:
        >>> compare_cost(110.0, 100.0, 10.0)
        (True, 10.0)
    """
    if baseline == 0:
        return actual == 0, 0.0

    percent_increase = (actual - baseline) / baseline * 100
    if baseline > 0:
        # same arithmetic as baseline * (1 + t/100), immune to rounding at the edge
        ok = actual <= baseline * (1 + threshold_percent / 100)
        if ok and percent_increase > threshold_percent:
            percent_increase = threshold_percent
        elif not ok and percent_increase <= threshold_percent:
            percent_increase = math.nextafter(threshold_percent, math.inf)
    else:
        ok = percent_increase <= threshold_percent
    return ok, percent_increase


def compare_buffers(
    actual: int,
    baseline: int,
    threshold_percent: float,
) -> tuple[bool, float]:
    """Buffer counts use the same rule as costs."""
    return compare_cost(float(actual), float(baseline), threshold_percent)


class Baseline(BaseModel):
    """
    Reference figures stored for one query execution.

    total_buffers is set only for baselines captured with EXPLAIN ANALYZE
    BUFFERS; plan_signature is absent for baselines recorded before
    signatures were captured.
    """

    model_config = ConfigDict(frozen=True)

    total_cost: float = Field(default=0.0, ge=0)
    total_buffers: int | None = Field(default=None, ge=0)
    plan_signature: PlanSignature | None = None


@dataclass(frozen=True)
class PlanVerdict:
    """
    Structured, explainable verdict for one query plan.

    Answers: did it pass, which figure decided, how much it moved, how the
    plan changed, and what looks wrong with the current plan regardless.
    """

    passed: bool
    metric: VerdictMetric
    actual: float
    baseline: float
    percent_increase: float
    threshold_percent: float
    within_threshold: bool

    actual_cost: float = 0.0
    baseline_cost: float = 0.0

    plan_changed: bool = False
    regressions: tuple[PlanRegression, ...] = ()
    warnings: tuple[PlanWarning, ...] = ()
    likely_cause: str | None = None

    @property
    def has_critical_regression(self) -> bool:
        return has_critical_regression(list(self.regressions))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON output."""
        return {
            "passed": self.passed,
            "metric": self.metric.value,
            "actual": self.actual,
            "baseline": self.baseline,
            "percent_increase": self.percent_increase,
            "threshold_percent": self.threshold_percent,
            "within_threshold": self.within_threshold,
            "actual_cost": self.actual_cost,
            "baseline_cost": self.baseline_cost,
            "plan_changed": self.plan_changed,
            "regressions": [r.model_dump(mode="json") for r in self.regressions],
            "warnings": [w.model_dump(mode="json") for w in self.warnings],
            "likely_cause": self.likely_cause,
        }


def assemble_verdict(
    baseline: Baseline,
    current_cost: float,
    current_signature: PlanSignature,
    *,
    threshold_percent: float = DEFAULT_COST_THRESHOLD_PERCENT,
    current_buffers: int | None = None,
    options: QueryOptions | None = None,
    ignored_tables: Iterable[str] = (),
    cost_info: PlanCostInfo | None = None,
) -> PlanVerdict:
    """
    Combine metric delta, plan regressions and quality warnings.

    Args:
        baseline: Stored reference figures and optional signature
        current_cost: Total cost of the plan just captured
        current_signature: Signature of the plan just captured
        threshold_percent: Allowed increase in percent
        current_buffers: Shared buffers of the current run, if measured
        options: Per-query options for the quality checks
        ignored_tables: Relations whose sequential scans are expected
        cost_info: Trivial-plan figures; derived from the current
            cost/buffers when omitted

    Returns:
        PlanVerdict; fails on a metric over threshold or any critical
        regression
    """
    if baseline.total_buffers is not None and current_buffers is not None:
        # ANALYZE mode: buffers gate, cost is informational
        metric = VerdictMetric.BUFFERS
        actual = float(current_buffers)
        reference = float(baseline.total_buffers)
        within, pct = compare_buffers(current_buffers, baseline.total_buffers, threshold_percent)
    else:
        metric = VerdictMetric.COST
        actual = current_cost
        reference = baseline.total_cost
        within, pct = compare_cost(current_cost, baseline.total_cost, threshold_percent)

    passed = within
    plan_changed = False
    regressions: list[PlanRegression] = []

    if baseline.plan_signature is not None:
        plan_changed = has_plan_changed(baseline.plan_signature, current_signature)
        regressions = detect_plan_regressions(baseline.plan_signature, current_signature)
        if has_critical_regression(regressions):
            passed = False

    if cost_info is None:
        cost_info = PlanCostInfo(total_cost=current_cost, total_buffers=current_buffers)

    warnings = analyze_plan_quality(current_signature, options, ignored_tables, cost_info)

    likely_cause = None
    if not within and not regressions and not plan_changed:
        likely_cause = LIKELY_CAUSE_STATISTICS

    logger.debug(
        "Verdict: %s (%s %.2f vs %.2f, %+.1f%%, %d regressions, %d warnings)",
        "pass" if passed else "fail",
        metric.value,
        actual,
        reference,
        pct,
        len(regressions),
        len(warnings),
    )

    return PlanVerdict(
        passed=passed,
        metric=metric,
        actual=actual,
        baseline=reference,
        percent_increase=pct,
        threshold_percent=threshold_percent,
        within_threshold=within,
        actual_cost=current_cost,
        baseline_cost=baseline.total_cost,
        plan_changed=plan_changed,
        regressions=tuple(regressions),
        warnings=tuple(warnings),
        likely_cause=likely_cause,
    )


def verdict_for_explain(
    baseline: Baseline,
    explain: PlanSource,
    *,
    threshold_percent: float = DEFAULT_COST_THRESHOLD_PERCENT,
    options: QueryOptions | None = None,
    ignored_tables: Iterable[str] = (),
    parser_config: ParserConfig | None = None,
) -> PlanVerdict:
    """
    Assemble a verdict straight from current EXPLAIN output.

    Reads cost and buffers from the root node and extracts the signature.

    Raises:
        ParseError: If the EXPLAIN output has no identifiable root node
    """
    output = parse_explain(explain, parser_config)
    metrics = extract_metrics(output)
    signature = extract_signature(output)

    return assemble_verdict(
        baseline,
        metrics.total_cost or 0.0,
        signature,
        threshold_percent=threshold_percent,
        current_buffers=metrics.total_buffers,
        options=options,
        ignored_tables=ignored_tables,
        cost_info=metrics.cost_info(),
    )


def baseline_from_explain(
    explain: PlanSource,
    *,
    with_buffers: bool = False,
    parser_config: ParserConfig | None = None,
) -> Baseline:
    """
    Capture a Baseline from EXPLAIN output (persisting it is the caller's job).

    Buffers are kept only when with_buffers is set and the plan has them.
    """
    output = parse_explain(explain, parser_config)
    metrics = extract_metrics(output)
    return Baseline(
        total_cost=metrics.total_cost or 0.0,
        total_buffers=metrics.total_buffers if with_buffers else None,
        plan_signature=extract_signature(output),
    )
