"""
Configuration for sqlregress.

Environment variables are the primary source, with an optional YAML or
JSON file. Nothing here is cached process-wide: load a CoreConfig once
and pass its values explicitly to the comparators and analyzers.

Usage:
    from sqlregress.config import load_config

    config = load_config()                  # env (or SQLREGRESS_CONFIG_FILE)
    config = load_config("regress.yaml")    # file

    diff = compare_result_sets(expected, actual, config.diff_config(query_options))
    warnings = analyze_plan_quality(sig, query_options, config.ignore_seqscan_tables)

Environment variables:
    SQLREGRESS_CONFIG_FILE               path to a YAML/JSON config file
    SQLREGRESS_FLOAT_TOLERANCE           e.g. 0.001
    SQLREGRESS_MAX_SAMPLES               e.g. 10
    SQLREGRESS_IGNORE_SEQSCAN_TABLES     comma-separated table names
    SQLREGRESS_COST_THRESHOLD_PERCENT    e.g. 15
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from sqlregress.exceptions import ConfigurationError
from sqlregress.options import QueryOptions
from sqlregress.resultset.models import DiffConfig
from sqlregress.verdict import DEFAULT_COST_THRESHOLD_PERCENT

logger = logging.getLogger(__name__)

ENV_PREFIX = "SQLREGRESS_"


class CoreConfig(BaseModel):
    """
    Global comparison settings.

    Per-query options (QueryOptions) refine these; they never live here.
    """

    model_config = ConfigDict(frozen=True)

    float_tolerance: float = Field(
        default=0.0,
        ge=0,
        description="Global numeric tolerance for result diffs, 0 means exact",
    )
    max_samples: int = Field(
        default=5,
        gt=0,
        description="Maximum sample rows kept per side of a result diff",
    )
    ignore_seqscan_tables: tuple[str, ...] = Field(
        default=(),
        description="Tables whose sequential scans are expected",
    )
    cost_threshold_percent: float = Field(
        default=DEFAULT_COST_THRESHOLD_PERCENT,
        ge=0,
        description="Allowed cost/buffer increase over baseline, in percent",
    )

    def diff_config(self, options: QueryOptions | None = None) -> DiffConfig:
        """
        DiffConfig for one query.

        A positive per-query tolerance overrides the global one.
        """
        tolerance = self.float_tolerance
        if options is not None and options.diff_float_tolerance > 0:
            tolerance = options.diff_float_tolerance
        return DiffConfig(float_tolerance=tolerance, max_samples=self.max_samples)


def _parse_env_int(key: str, default: int) -> int:
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning("Could not parse %s=%s, using %s", key, value, default)
        return default


def _parse_env_float(key: str, default: float) -> float:
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning("Could not parse %s=%s, using %s", key, value, default)
        return default


def _parse_env_list(key: str) -> tuple[str, ...]:
    value = os.environ.get(key, "")
    return tuple(part.strip() for part in value.split(",") if part.strip())


def _build(data: dict[str, Any], source: str) -> CoreConfig:
    try:
        return CoreConfig(**data)
    except ValidationError as e:
        first = e.errors()[0]
        key = ".".join(str(x) for x in first["loc"]) or None
        raise ConfigurationError(
            f"Invalid configuration in {source}: {first['msg']}",
            config_key=key,
        ) from e


def load_config_from_env() -> CoreConfig:
    """Load configuration from SQLREGRESS_* environment variables."""
    defaults = CoreConfig()
    data: dict[str, Any] = {
        "float_tolerance": _parse_env_float(
            f"{ENV_PREFIX}FLOAT_TOLERANCE", defaults.float_tolerance
        ),
        "max_samples": _parse_env_int(f"{ENV_PREFIX}MAX_SAMPLES", defaults.max_samples),
        "ignore_seqscan_tables": _parse_env_list(f"{ENV_PREFIX}IGNORE_SEQSCAN_TABLES"),
        "cost_threshold_percent": _parse_env_float(
            f"{ENV_PREFIX}COST_THRESHOLD_PERCENT", defaults.cost_threshold_percent
        ),
    }
    return _build(data, "environment")


def _flatten(data: dict[str, Any]) -> dict[str, Any]:
    """
    Accept both flat keys and the sectioned regress.yaml layout:

        plan_quality:
          ignore_seqscan_tables: [audit_log]
        diff_comparison:
          float_tolerance: 0.01
          max_samples: 10
    """
    flat = {k: v for k, v in data.items() if k not in ("plan_quality", "diff_comparison")}

    plan_quality = data.get("plan_quality") or {}
    if "ignore_seqscan_tables" in plan_quality:
        flat["ignore_seqscan_tables"] = plan_quality["ignore_seqscan_tables"]

    diff_comparison = data.get("diff_comparison") or {}
    for key in ("float_tolerance", "max_samples"):
        # zero or missing means "use the default"
        if diff_comparison.get(key):
            flat[key] = diff_comparison[key]

    known = set(CoreConfig.model_fields)
    unknown = sorted(set(flat) - known)
    if unknown:
        logger.debug("Ignoring unrelated config keys: %s", unknown)
    return {k: v for k, v in flat.items() if k in known}


def load_config_from_file(path: str | Path) -> CoreConfig:
    """
    Load configuration from a YAML or JSON file.

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigurationError(f"Config file not found: {path}")

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}") from e

    try:
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(raw)
        else:
            data = json.loads(raw)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot parse config file {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config file {path} must contain a mapping, got {type(data).__name__}"
        )

    return _build(_flatten(data), str(path))


def load_config(path: str | Path | None = None) -> CoreConfig:
    """
    Load configuration.

    Lookup order:
    1. Explicit path argument
    2. SQLREGRESS_CONFIG_FILE environment variable
    3. SQLREGRESS_* environment variables
    """
    config_file = path or os.environ.get(f"{ENV_PREFIX}CONFIG_FILE")
    if config_file:
        return load_config_from_file(config_file)
    return load_config_from_env()
