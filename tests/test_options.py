"""Tests for per-query option parsing."""

from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from sqlregress.options import DEFAULT_QUERY_OPTIONS, QueryOptions, parse_query_options


class TestParseQueryOptions:
    """Test the regresql: option list parser."""

    @pytest.mark.parametrize("metadata", [None, "", "   "])
    def test_empty(self, metadata: str | None) -> None:
        assert parse_query_options(metadata) == DEFAULT_QUERY_OPTIONS

    def test_all_flags(self) -> None:
        options = parse_query_options("notest, nobaseline, noseqscanwarn")
        assert options == QueryOptions(no_test=True, no_baseline=True, no_seqscan_warn=True)

    def test_case_insensitive(self) -> None:
        options = parse_query_options("NoSeqScanWarn,DiffFloatTolerance:0.25")
        assert options.no_seqscan_warn
        assert options.diff_float_tolerance == 0.25

    def test_unknown_tokens_ignored(self) -> None:
        assert parse_query_options("fast, notest") == QueryOptions(no_test=True)

    @pytest.mark.parametrize("raw", ["abc", "-1", "nan", ""])
    def test_invalid_tolerance_ignored(self, raw: str, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="sqlregress.options"):
            options = parse_query_options(f"difffloattolerance:{raw}, notest")

        assert options.diff_float_tolerance == 0.0
        assert options.no_test
        assert caplog.records

    def test_options_frozen(self) -> None:
        with pytest.raises(ValidationError):
            DEFAULT_QUERY_OPTIONS.no_test = True  # type: ignore[misc]
