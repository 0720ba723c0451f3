"""
sqlregress CLI - result-set and query-plan regression checks.

Every command prints JSON on stdout; errors go to stderr.

Usage:
    sqlregress diff-results expected.json actual.json --tolerance 0.001
    sqlregress signature explain.json
    sqlregress check-plan baseline_explain.json current_explain.json --threshold 15

Exit codes:
    0  identical results / passing verdict
    1  results differ / failing verdict
    2  unreadable or invalid input
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated, Any, NoReturn, Optional

import typer
from rich.console import Console

from sqlregress import __version__
from sqlregress.config import load_config
from sqlregress.exceptions import ConfigurationError, SQLRegressError
from sqlregress.options import parse_query_options
from sqlregress.parser import ParseError
from sqlregress.resultset import DiffConfig, ResultSet, compare_result_sets
from sqlregress.plan import extract_signature
from sqlregress.verdict import baseline_from_explain, verdict_for_explain

EXIT_DIFFERENT = 1
EXIT_INPUT_ERROR = 2

app = typer.Typer(
    name="sqlregress",
    help="Result-set and query-plan regression checks for PostgreSQL",
    no_args_is_help=True,
)

console = Console()
error_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"sqlregress version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log debug output to stderr."),
    ] = False,
) -> None:
    """sqlregress - Result-set and query-plan regression checks."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )


def _print_json(data: dict[str, Any]) -> None:
    # default=str keeps dates/decimals from result cells printable
    console.print_json(json.dumps(data, default=str))


def _fail(error: SQLRegressError) -> NoReturn:
    error_console.print(f"[red]Error:[/red] {error.message}")
    detail = getattr(error, "detail", None)
    if detail:
        error_console.print(f"\n[dim]{detail}[/dim]")
    raise typer.Exit(code=EXIT_INPUT_ERROR)


def _load_result_set(path: Path) -> ResultSet:
    try:
        data = json.loads(path.read_text())
    except (OSError, ValueError) as e:
        raise ParseError(f"Cannot read result set {path}", detail=str(e), source="json_decode") from e

    if not isinstance(data, dict) or not isinstance(data.get("columns"), list):
        raise ParseError(
            f"Result set {path} must be an object with 'columns' and 'rows'",
            source="structure",
        )
    rows = data.get("rows") or []
    if not isinstance(rows, list) or not all(isinstance(r, list) for r in rows):
        raise ParseError(f"Result set {path} has malformed 'rows'", source="structure")
    return ResultSet.from_dict(data)


@app.command("diff-results")
def diff_results(
    expected_file: Annotated[
        Path,
        typer.Argument(help="Expected result set (JSON)", exists=True, readable=True),
    ],
    actual_file: Annotated[
        Path,
        typer.Argument(help="Actual result set (JSON)", exists=True, readable=True),
    ],
    tolerance: Annotated[
        float,
        typer.Option("--tolerance", "-t", min=0.0, help="Absolute numeric tolerance"),
    ] = 0.0,
    max_samples: Annotated[
        int,
        typer.Option("--max-samples", min=1, help="Sample rows kept per side"),
    ] = 5,
) -> None:
    """
    Compare two result sets and classify the difference.

    Result sets are JSON objects: {"columns": [...], "rows": [[...], ...]}.
    """
    try:
        expected = _load_result_set(expected_file)
        actual = _load_result_set(actual_file)
    except ParseError as e:
        _fail(e)

    diff = compare_result_sets(
        expected,
        actual,
        DiffConfig(float_tolerance=tolerance, max_samples=max_samples),
    )
    _print_json(diff.to_dict())

    if not diff.identical:
        raise typer.Exit(code=EXIT_DIFFERENT)


@app.command()
def signature(
    explain_file: Annotated[
        Path,
        typer.Argument(help="EXPLAIN (FORMAT JSON) output", exists=True, readable=True),
    ],
) -> None:
    """Print the plan signature of an EXPLAIN output."""
    try:
        sig = extract_signature(explain_file)
    except ParseError as e:
        _fail(e)

    _print_json(sig.model_dump(mode="json"))


@app.command("check-plan")
def check_plan(
    baseline_file: Annotated[
        Path,
        typer.Argument(help="Baseline EXPLAIN (FORMAT JSON) output", exists=True, readable=True),
    ],
    current_file: Annotated[
        Path,
        typer.Argument(help="Current EXPLAIN (FORMAT JSON) output", exists=True, readable=True),
    ],
    threshold: Annotated[
        Optional[float],
        typer.Option(
            "--threshold",
            "-t",
            min=0.0,
            help="Allowed cost/buffer increase in percent (default from config)",
        ),
    ] = None,
    ignore_table: Annotated[
        Optional[list[str]],
        typer.Option(
            "--ignore-table",
            "-i",
            help="Table whose sequential scans are expected (repeatable)",
        ),
    ] = None,
    query_options: Annotated[
        Optional[str],
        typer.Option(
            "--options",
            help="Per-query options, e.g. 'noseqscanwarn'",
        ),
    ] = None,
    config_file: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="YAML/JSON config file"),
    ] = None,
) -> None:
    """
    Check the current plan against a baseline plan.

    Buffers gate the verdict when both plans carry EXPLAIN (ANALYZE, BUFFERS)
    data; otherwise the planner's total cost does.
    """
    try:
        config = load_config(config_file)
        baseline = baseline_from_explain(baseline_file, with_buffers=True)
        ignored = tuple(config.ignore_seqscan_tables) + tuple(ignore_table or ())
        verdict = verdict_for_explain(
            baseline,
            current_file,
            threshold_percent=(
                threshold if threshold is not None else config.cost_threshold_percent
            ),
            options=parse_query_options(query_options),
            ignored_tables=ignored,
        )
    except (ParseError, ConfigurationError) as e:
        _fail(e)

    _print_json(verdict.to_dict())

    if not verdict.passed:
        raise typer.Exit(code=EXIT_DIFFERENT)


if __name__ == "__main__":
    app()
