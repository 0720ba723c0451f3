"""Tests for configuration loading from environment and files."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from sqlregress.config import (
    CoreConfig,
    load_config,
    load_config_from_env,
    load_config_from_file,
)
from sqlregress.exceptions import ConfigurationError
from sqlregress.options import QueryOptions

ENV_VARS = (
    "SQLREGRESS_CONFIG_FILE",
    "SQLREGRESS_FLOAT_TOLERANCE",
    "SQLREGRESS_MAX_SAMPLES",
    "SQLREGRESS_IGNORE_SEQSCAN_TABLES",
    "SQLREGRESS_COST_THRESHOLD_PERCENT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's environment out of these tests."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


class TestEnvConfig:
    """Test loading from SQLREGRESS_* variables."""

    def test_defaults(self) -> None:
        config = load_config_from_env()

        assert config == CoreConfig()
        assert config.float_tolerance == 0.0
        assert config.max_samples == 5
        assert config.ignore_seqscan_tables == ()
        assert config.cost_threshold_percent == 10.0

    def test_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SQLREGRESS_FLOAT_TOLERANCE", "0.01")
        monkeypatch.setenv("SQLREGRESS_MAX_SAMPLES", "20")
        monkeypatch.setenv("SQLREGRESS_IGNORE_SEQSCAN_TABLES", "audit_log, , settings")
        monkeypatch.setenv("SQLREGRESS_COST_THRESHOLD_PERCENT", "25")

        config = load_config_from_env()

        assert config.float_tolerance == 0.01
        assert config.max_samples == 20
        assert config.ignore_seqscan_tables == ("audit_log", "settings")
        assert config.cost_threshold_percent == 25.0

    def test_unparseable_falls_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SQLREGRESS_MAX_SAMPLES", "lots")
        assert load_config_from_env().max_samples == 5

    def test_invalid_value_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SQLREGRESS_MAX_SAMPLES", "0")

        with pytest.raises(ConfigurationError) as exc_info:
            load_config_from_env()
        assert exc_info.value.config_key == "max_samples"


class TestFileConfig:
    """Test loading from YAML and JSON files."""

    def test_flat_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "regress.yaml"
        path.write_text("float_tolerance: 0.5\nignore_seqscan_tables:\n  - audit_log\n")

        config = load_config_from_file(path)

        assert config.float_tolerance == 0.5
        assert config.ignore_seqscan_tables == ("audit_log",)

    def test_sectioned_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "regress.yml"
        path.write_text(
            "root: ./queries\n"
            "plan_quality:\n"
            "  ignore_seqscan_tables: [audit_log, countries]\n"
            "diff_comparison:\n"
            "  float_tolerance: 0.001\n"
            "  max_samples: 0\n"
        )

        config = load_config_from_file(path)

        assert config.ignore_seqscan_tables == ("audit_log", "countries")
        assert config.float_tolerance == 0.001
        # zero means default
        assert config.max_samples == 5

    def test_json(self, tmp_path: Path) -> None:
        path = tmp_path / "regress.json"
        path.write_text(json.dumps({"cost_threshold_percent": 15, "max_samples": 3}))

        config = load_config_from_file(path)

        assert config.cost_threshold_percent == 15.0
        assert config.max_samples == 3

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "regress.yaml"
        path.write_text("")
        assert load_config_from_file(path) == CoreConfig()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="not found"):
            load_config_from_file(tmp_path / "nope.yaml")

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "regress.yaml"
        path.write_text("plan_quality: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Cannot parse"):
            load_config_from_file(path)

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "regress.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_config_from_file(path)

    def test_negative_tolerance_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "regress.json"
        path.write_text(json.dumps({"float_tolerance": -1}))

        with pytest.raises(ConfigurationError) as exc_info:
            load_config_from_file(path)
        assert exc_info.value.config_key == "float_tolerance"


class TestLoadConfig:
    """Test source selection."""

    def test_explicit_path_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "regress.json"
        path.write_text(json.dumps({"max_samples": 7}))
        monkeypatch.setenv("SQLREGRESS_MAX_SAMPLES", "9")

        assert load_config(path).max_samples == 7

    def test_config_file_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "regress.json"
        path.write_text(json.dumps({"max_samples": 7}))
        monkeypatch.setenv("SQLREGRESS_CONFIG_FILE", str(path))

        assert load_config().max_samples == 7

    def test_env_fallback(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SQLREGRESS_MAX_SAMPLES", "9")
        assert load_config().max_samples == 9


class TestDiffConfig:
    """Test per-query DiffConfig derivation."""

    def test_global_tolerance(self) -> None:
        config = CoreConfig(float_tolerance=0.01, max_samples=8)

        diff_config = config.diff_config()

        assert diff_config.float_tolerance == 0.01
        assert diff_config.max_samples == 8

    def test_query_override(self) -> None:
        config = CoreConfig(float_tolerance=0.01)
        diff_config = config.diff_config(QueryOptions(diff_float_tolerance=0.5))
        assert diff_config.float_tolerance == 0.5

    def test_zero_query_tolerance_keeps_global(self) -> None:
        config = CoreConfig(float_tolerance=0.01)
        assert config.diff_config(QueryOptions()).float_tolerance == 0.01
