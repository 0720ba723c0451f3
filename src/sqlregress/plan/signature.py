"""
Plan signature extraction.

Walks a decoded EXPLAIN tree in pre-order and keeps only what is needed to
detect behavioural drift: node types, how each relation is scanned, join
strategies, and whether a Seq Scan or Sort appears anywhere.

Relations are keyed by name, so a relation scanned twice (e.g. a self-join)
keeps only the last visited ScanInfo.

Usage:
    from sqlregress.plan import extract_signature, has_plan_changed

    baseline = extract_signature(baseline_explain_json)
    current = extract_signature(current_explain_json)
    if has_plan_changed(baseline, current):
        ...
"""

from __future__ import annotations

import logging
import re
from typing import Iterable

from sqlregress.parser.config import ParserConfig
from sqlregress.parser.models import INDEX_SCAN_TYPES, NodeType
from sqlregress.parser.parser import PlanSource, parse_explain
from sqlregress.plan.models import PlanSignature, ScanInfo

logger = logging.getLogger(__name__)

# "(customer_id = $1)" -> "customer_id"
_SIMPLE_COLUMN = re.compile(r"\(([a-zA-Z_][a-zA-Z0-9_]*)\s*=")


def extract_signature(
    source: PlanSource,
    config: ParserConfig | None = None,
) -> PlanSignature:
    """
    Build a PlanSignature from EXPLAIN output.

    Args:
        source: Anything parse_explain accepts (decoded dict/list, JSON
            string, file path, ExplainOutput or PlanNode)
        config: Parser resource limits

    Returns:
        PlanSignature for the whole tree

    Raises:
        ParseError: If no plan node is identifiable at the root
    """
    explain = parse_explain(source, config)

    node_types: list[str] = []
    relations: dict[str, ScanInfo] = {}
    indexes_used: list[str] = []
    join_types: list[str] = []
    has_seq_scan = False
    has_sort = False

    for node in explain.plan.iter_nodes():
        node_type = node.node_type
        if node_type:
            node_types.append(node_type)
            if node_type == NodeType.SEQ_SCAN:
                has_seq_scan = True
            elif node_type == NodeType.SORT:
                has_sort = True
            elif node.is_join_node:
                join_types.append(node_type)

        if node.relation_name:
            scan = ScanInfo(
                scan_type=node_type,
                index_name=node.index_name or "",
                index_cond=node.index_cond or "",
                filter=node.filter or "",
            )
            relations[node.relation_name] = scan
            if scan.index_name:
                indexes_used.append(scan.index_name)

    signature = PlanSignature(
        node_types=tuple(node_types),
        relations=relations,
        indexes_used=tuple(indexes_used),
        join_types=tuple(join_types),
        has_seq_scan=has_seq_scan,
        has_sort=has_sort,
    )

    logger.debug(
        "Extracted plan signature: %d nodes, %d relations, joins=%s",
        len(node_types),
        len(relations),
        list(join_types),
    )

    return signature


def is_index_scan(scan_type: str) -> bool:
    """Index Scan, Index Only Scan and Bitmap Index Scan are index-family scans."""
    return scan_type in INDEX_SCAN_TYPES


def scans_equal(baseline: ScanInfo, current: ScanInfo) -> bool:
    """Two scans are the same when scan type and index name match."""
    return baseline.scan_type == current.scan_type and baseline.index_name == current.index_name


def has_plan_changed(baseline: PlanSignature, current: PlanSignature) -> bool:
    """
    Coarse "did the plan change" signal.

    True when the relation count differs, a baseline relation is missing or
    read differently (scan type or index), or the join sequence differs.
    """
    if len(baseline.relations) != len(current.relations):
        return True

    for table, baseline_scan in baseline.relations.items():
        current_scan = current.relations.get(table)
        if current_scan is None or not scans_equal(baseline_scan, current_scan):
            return True

    return tuple(baseline.join_types) != tuple(current.join_types)


def extract_simple_column(index_cond: str) -> str:
    """
    Column of a single-column equality index condition, or "".

    >>> extract_simple_column("(email = 'a@b.c'::text)")
    'email'
    """
    match = _SIMPLE_COLUMN.search(index_cond or "")
    return match.group(1) if match else ""


def format_scan_description(scan: ScanInfo) -> str:
    return scan.describe()


def format_indexes_used(indexes: Iterable[str]) -> str:
    joined = ", ".join(indexes)
    return joined or "none"
