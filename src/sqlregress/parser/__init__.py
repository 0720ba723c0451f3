"""EXPLAIN JSON parsing module."""

from sqlregress.parser.config import DEFAULT_CONFIG, STRICT_CONFIG, ParserConfig
from sqlregress.parser.models import ExplainOutput, NodeType, PlanNode
from sqlregress.parser.parser import ParseError, parse_explain

__all__ = [
    "ExplainOutput",
    "NodeType",
    "PlanNode",
    "parse_explain",
    "ParseError",
    "ParserConfig",
    "DEFAULT_CONFIG",
    "STRICT_CONFIG",
]
