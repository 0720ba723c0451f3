"""
Plan analysis: signature extraction, regression detection, quality checks.

Usage:
    from sqlregress.plan import (
        analyze_plan_quality,
        detect_plan_regressions,
        extract_signature,
    )

    baseline = extract_signature(baseline_explain)
    current = extract_signature(current_explain)
    for regression in detect_plan_regressions(baseline, current):
        print(regression.severity.value, regression.message)
"""

from sqlregress.plan.metrics import (
    PlanMetrics,
    RowEstimate,
    RowEstimateAnalysis,
    compare_row_estimates,
    extract_metrics,
)
from sqlregress.plan.models import (
    PlanCostInfo,
    PlanRegression,
    PlanSignature,
    PlanWarning,
    RegressionKind,
    ScanInfo,
    Severity,
    WarningKind,
)
from sqlregress.plan.quality import analyze_plan_quality, is_trivial_plan
from sqlregress.plan.regression import detect_plan_regressions, has_critical_regression
from sqlregress.plan.signature import (
    extract_signature,
    extract_simple_column,
    format_indexes_used,
    format_scan_description,
    has_plan_changed,
    is_index_scan,
    scans_equal,
)

__all__ = [
    # Signature
    "extract_signature",
    "has_plan_changed",
    "is_index_scan",
    "scans_equal",
    "extract_simple_column",
    "format_scan_description",
    "format_indexes_used",
    # Regressions
    "detect_plan_regressions",
    "has_critical_regression",
    # Quality
    "analyze_plan_quality",
    "is_trivial_plan",
    # Metrics
    "extract_metrics",
    "compare_row_estimates",
    "PlanMetrics",
    "RowEstimate",
    "RowEstimateAnalysis",
    # Models
    "PlanCostInfo",
    "PlanRegression",
    "PlanSignature",
    "PlanWarning",
    "RegressionKind",
    "ScanInfo",
    "Severity",
    "WarningKind",
]
