"""sqlregress - Result-set and query-plan regression analysis for PostgreSQL."""

__version__ = "0.3.0"
__license__ = "MIT"

# Exception hierarchy (import first so other modules can use it)
from sqlregress.exceptions import (
    SQLRegressError,
    ConfigurationError,
    ParseError,
)

from sqlregress.config import CoreConfig, load_config
from sqlregress.options import QueryOptions, parse_query_options
from sqlregress.parser import ExplainOutput, PlanNode, parse_explain
from sqlregress.plan import (
    PlanRegression,
    PlanSignature,
    PlanWarning,
    RegressionKind,
    ScanInfo,
    Severity,
    WarningKind,
    analyze_plan_quality,
    detect_plan_regressions,
    extract_signature,
    has_plan_changed,
)
from sqlregress.resultset import (
    DiffCategory,
    DiffConfig,
    ResultSet,
    StructuredDiff,
    compare_result_sets,
    values_equal,
)
from sqlregress.verdict import (
    Baseline,
    PlanVerdict,
    assemble_verdict,
    compare_cost,
)

__all__ = [
    "__version__",
    # Exceptions
    "SQLRegressError",
    "ConfigurationError",
    "ParseError",
    # Config
    "CoreConfig",
    "load_config",
    "QueryOptions",
    "parse_query_options",
    # Parser
    "ExplainOutput",
    "PlanNode",
    "parse_explain",
    # Result sets
    "ResultSet",
    "DiffCategory",
    "DiffConfig",
    "StructuredDiff",
    "compare_result_sets",
    "values_equal",
    # Plans
    "PlanSignature",
    "ScanInfo",
    "PlanRegression",
    "PlanWarning",
    "RegressionKind",
    "WarningKind",
    "Severity",
    "extract_signature",
    "has_plan_changed",
    "detect_plan_regressions",
    "analyze_plan_quality",
    # Verdicts
    "Baseline",
    "PlanVerdict",
    "assemble_verdict",
    "compare_cost",
]
