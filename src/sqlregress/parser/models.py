"""
Typed view of PostgreSQL EXPLAIN (FORMAT JSON) output.

Only the keys that signatures, quality checks and metrics read are
declared; anything else EXPLAIN emits ("Parallel Aware", "Sort Key", ...)
is kept in `model_extra`. Only the root must carry a "Node Type"; a child
without one reads as "" and non-object children are dropped. ANALYZE
counters and BUFFERS block counts are None when the run did not collect
them.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterator

from pydantic import BaseModel, ConfigDict, Field, field_validator


class NodeType(str, Enum):
    """Plan node types with special meaning to the analyzers."""
    SEQ_SCAN = "Seq Scan"
    INDEX_SCAN = "Index Scan"
    INDEX_ONLY_SCAN = "Index Only Scan"
    BITMAP_INDEX_SCAN = "Bitmap Index Scan"
    BITMAP_HEAP_SCAN = "Bitmap Heap Scan"

    NESTED_LOOP = "Nested Loop"
    MERGE_JOIN = "Merge Join"
    HASH_JOIN = "Hash Join"

    SORT = "Sort"


JOIN_NODE_TYPES = frozenset({
    NodeType.NESTED_LOOP.value,
    NodeType.HASH_JOIN.value,
    NodeType.MERGE_JOIN.value,
})

INDEX_SCAN_TYPES = frozenset({
    NodeType.INDEX_SCAN.value,
    NodeType.INDEX_ONLY_SCAN.value,
    NodeType.BITMAP_INDEX_SCAN.value,
})


class PlanNode(BaseModel):
    """One operator of the plan tree; children live in `plans`."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    node_type: str = Field(default="", alias="Node Type")

    # planner estimates
    total_cost: float | None = Field(default=None, alias="Total Cost")
    plan_rows: float | None = Field(default=None, alias="Plan Rows")

    # ANALYZE
    actual_rows: float | None = Field(default=None, alias="Actual Rows")
    actual_loops: int | None = Field(default=None, alias="Actual Loops")

    # what is read and how
    relation_name: str | None = Field(default=None, alias="Relation Name")
    index_name: str | None = Field(default=None, alias="Index Name")
    index_cond: str | None = Field(default=None, alias="Index Cond")
    filter: str | None = Field(default=None, alias="Filter")
    join_type: str | None = Field(default=None, alias="Join Type")

    # BUFFERS, in 8KB blocks
    shared_hit_blocks: int | None = Field(default=None, alias="Shared Hit Blocks")
    shared_read_blocks: int | None = Field(default=None, alias="Shared Read Blocks")
    local_hit_blocks: int | None = Field(default=None, alias="Local Hit Blocks")
    local_read_blocks: int | None = Field(default=None, alias="Local Read Blocks")
    temp_read_blocks: int | None = Field(default=None, alias="Temp Read Blocks")
    temp_written_blocks: int | None = Field(default=None, alias="Temp Written Blocks")

    # track_io_timing, milliseconds
    io_read_time: float | None = Field(default=None, alias="I/O Read Time")
    io_write_time: float | None = Field(default=None, alias="I/O Write Time")

    plans: list[PlanNode] = Field(default_factory=list, alias="Plans")

    @field_validator("plans", mode="before")
    @classmethod
    def _keep_object_children(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return []
        return [child for child in value if isinstance(child, (dict, PlanNode))]

    @property
    def is_join_node(self) -> bool:
        return self.node_type in JOIN_NODE_TYPES

    def iter_nodes(self) -> Iterator[PlanNode]:
        """
        Yield this node and its descendants in pre-order.

        Uses an explicit stack so plan depth is bounded only by the parser
        limits, never by the interpreter recursion limit. Siblings come out
        in document order.
        """
        stack: list[PlanNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.plans))


class ExplainOutput(BaseModel):
    """
    The object inside the one-element array EXPLAIN (FORMAT JSON) returns.

    Usage:
        output = parse_explain(path)
        seq_scans = [n for n in output.plan.iter_nodes() if n.node_type == "Seq Scan"]
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    plan: PlanNode = Field(..., alias="Plan")
    planning_time: float | None = Field(default=None, alias="Planning Time")
    execution_time: float | None = Field(default=None, alias="Execution Time")

    @property
    def has_analyze_data(self) -> bool:
        """EXPLAIN ANALYZE reports an execution time; plain EXPLAIN does not."""
        return self.execution_time is not None

    def node_count(self) -> int:
        return sum(1 for _ in self.plan.iter_nodes())
