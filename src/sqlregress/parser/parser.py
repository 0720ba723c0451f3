"""
Decode EXPLAIN (FORMAT JSON) output into ExplainOutput.

Input may arrive as a file, a JSON string, already-decoded data, or a
model. Whatever the form, the same steps run:

    load -> unwrap [ {...} ] -> find root node -> depth limit
         -> pydantic validation -> node-count limit

Any failure is a ParseError naming the step (`source`) that rejected the
input. A plan without a root node never yields a partial result.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Union

from pydantic import ValidationError

from sqlregress.exceptions import ParseError
from sqlregress.parser.config import DEFAULT_CONFIG, ParserConfig
from sqlregress.parser.models import ExplainOutput, PlanNode

PlanSource = Union[str, Path, dict[str, Any], list[Any], ExplainOutput, PlanNode]

__all__ = ["ParseError", "PlanSource", "parse_explain"]

_MB = 1024 * 1024


def parse_explain(
    source: PlanSource,
    config: ParserConfig | None = None,
) -> ExplainOutput:
    """
    Parse EXPLAIN output.

    A str starting with '{' or '[' is JSON text; any other str is a path.
    A dict may be the inner EXPLAIN object ({"Plan": ...}) or a bare root
    node ({"Node Type": ...}).

    Raises:
        ParseError: On unreadable, malformed or oversized input

    Example:
        >>> parse_explain([{"Plan": {"Node Type": "Seq Scan"}}]).plan.node_type
        'Seq Scan'
    """
    if isinstance(source, ExplainOutput):
        return source
    if isinstance(source, PlanNode):
        return ExplainOutput(plan=source)

    config = config or DEFAULT_CONFIG

    data = _root_object(_decode(source, config))
    _enforce_depth(data["Plan"], config.max_depth)

    try:
        output = ExplainOutput.model_validate(data)
    except ValidationError as e:
        problems = [
            f"  {' -> '.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in e.errors()
        ]
        raise ParseError(
            "EXPLAIN output validation failed",
            detail="\n".join(problems),
            source="validation",
        ) from e

    count = output.node_count()
    if count > config.max_nodes:
        raise ParseError(
            f"Plan too large: {count:,} nodes (max {config.max_nodes:,})",
            detail="Raise ParserConfig.max_nodes to accept bigger plans",
            source="resource_limit",
        )

    return output


def _decode(source: PlanSource, config: ParserConfig) -> dict[str, Any] | list[Any]:
    if isinstance(source, (dict, list)):
        return source

    if isinstance(source, str) and source.lstrip().startswith(("{", "[")):
        return _loads(source)

    if isinstance(source, (str, Path)):
        return _loads(_read_file(Path(source), config))

    raise ParseError(
        f"Unsupported source type: {type(source).__name__}",
        detail="Pass a path, JSON text, a dict/list, ExplainOutput or PlanNode",
        source="type_check",
    )


def _read_file(path: Path, config: ParserConfig) -> str:
    if not path.is_file():
        raise ParseError(f"File not found: {path}", source="file_read")

    size_mb = path.stat().st_size / _MB
    if size_mb > config.max_file_size_mb:
        raise ParseError(
            f"File too large: {size_mb:.1f}MB (max {config.max_file_size_mb}MB)",
            detail="Raise ParserConfig.max_file_size_mb to accept bigger files",
            source="resource_limit",
        )

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ParseError(f"Cannot read file: {path}", detail=str(e), source="file_read") from e

    if not text.strip():
        raise ParseError(f"File is empty: {path}", source="file_read")
    return text


def _loads(text: str) -> dict[str, Any] | list[Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(
            "Invalid JSON format",
            detail=f"Line {e.lineno}, column {e.colno}: {e.msg}",
            source="json_decode",
        ) from e

    if not isinstance(data, (dict, list)):
        raise ParseError(
            f"Expected JSON object or array, got {type(data).__name__}",
            source="json_decode",
        )
    return data


def _root_object(data: dict[str, Any] | list[Any]) -> dict[str, Any]:
    """Reduce decoded input to {"Plan": {...}, ...}."""
    if isinstance(data, list):
        if not data:
            raise ParseError(
                "Empty array - no EXPLAIN output found",
                detail="EXPLAIN (FORMAT JSON) returns a one-element array",
                source="structure",
            )
        if len(data) > 1:
            raise ParseError(
                f"Expected a single EXPLAIN output, got {len(data)} elements",
                detail="Compare one statement's plan at a time",
                source="structure",
            )
        data = data[0]
        if not isinstance(data, dict):
            raise ParseError(
                f"Expected object inside array, got {type(data).__name__}",
                source="structure",
            )

    if "Plan" not in data:
        if "Node Type" not in data and "node_type" not in data:
            raise ParseError(
                "Missing 'Plan' field - no plan node at the root",
                detail="Expected {'Plan': {'Node Type': ...}} or a bare plan node",
                source="structure",
            )
        data = {"Plan": data}

    root = data["Plan"]
    if not isinstance(root, dict):
        raise ParseError(
            f"'Plan' must be an object, got {type(root).__name__}",
            source="structure",
        )
    if not (root.get("Node Type") or root.get("node_type")):
        raise ParseError(
            "Root plan node has no 'Node Type'",
            detail="Children may omit it; the root may not",
            source="structure",
        )
    return data


def _enforce_depth(root: dict[str, Any], max_depth: int) -> None:
    """Reject over-deep trees on the raw dicts, before validation recurses."""
    pending: list[tuple[dict[str, Any], int]] = [(root, 1)]
    while pending:
        node, depth = pending.pop()
        if depth > max_depth:
            raise ParseError(
                f"Plan too deeply nested: depth > {max_depth}",
                detail="Raise ParserConfig.max_depth to accept deeper plans",
                source="resource_limit",
            )
        children = node.get("Plans")
        if isinstance(children, list):
            pending.extend((child, depth + 1) for child in children if isinstance(child, dict))
