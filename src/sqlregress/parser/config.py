"""Resource limits applied while parsing EXPLAIN output."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ParserConfig(BaseModel):
    """
    Upper bounds for one EXPLAIN document.

    Plans produced by PostgreSQL stay far below the defaults; the limits
    exist for corrupted or hostile files.
    """

    model_config = ConfigDict(frozen=True)

    max_file_size_mb: float = Field(default=100.0, gt=0)
    max_nodes: int = Field(default=50_000, gt=0)
    max_depth: int = Field(default=100, gt=0)


DEFAULT_CONFIG = ParserConfig()

# for plans from sources you do not control
STRICT_CONFIG = ParserConfig(max_file_size_mb=10.0, max_nodes=5_000, max_depth=50)
