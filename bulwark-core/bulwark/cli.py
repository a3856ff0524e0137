# Bulwark — Smart-Contract Risk Analyzer
# Copyright (C) 2026 Bulwark Project Contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""Bulwark CLI: Typer entry point.

Commands:
- bulwark analyze [PATH]   - Analyze a Rust/Anchor source tree, print the risk verdict
- bulwark file PATH        - Analyze a single Rust file
- bulwark config [FILE]    - Validate a configuration file (or print the defaults)
- bulwark patterns         - List the semantic pattern registry
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import NoReturn, Optional

import typer

from bulwark import __version__
from bulwark.config import apply_overrides, dump_config, load_config
from bulwark.errors import BulwarkError
from bulwark.models.config import AnalyzerConfig, OutputFormat
from bulwark.models.metrics import RiskLevel
from bulwark.reporter.console_out import (
    console,
    print_file_record,
    print_full_report,
    print_pattern_registry,
)
from bulwark.reporter.json_out import render, to_canonical_json, write_report
from bulwark.reporter.summary import build_report
from bulwark.scanner.engine import AnalyzerEngine
from bulwark.scanner.pattern_detector import load_registry

app = typer.Typer(
    name="bulwark",
    help=(
        "Bulwark: static risk analysis for Solana/Anchor smart contracts. "
        "Run 'bulwark <command> --help' for flags (e.g. bulwark analyze --help for --json, --fail-on)."
    ),
    add_completion=False,
)

logger = logging.getLogger("bulwark")

# Exit code when --fail-on is met
EXIT_RISK_GATE = 2


def _configure_logging(verbose: bool, quiet: bool) -> None:
    if quiet:
        logging.basicConfig(level=logging.ERROR)
    elif verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


def _fail(error: BulwarkError) -> NoReturn:
    console.print(f"Error: {error.message}", style="red", markup=False)
    raise typer.Exit(code=1)


def _load_base_config(config_path: Optional[str]) -> AnalyzerConfig:
    return load_config(config_path) if config_path else AnalyzerConfig()


@app.command()
def analyze(
    path: Optional[str] = typer.Argument(None, help="Directory or .rs file to analyze (default: config root or '.')"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="YAML configuration file"),
    output_format: Optional[OutputFormat] = typer.Option(None, "--format", "-f", help="Report format for --output"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write the full report to this file"),
    output_json: bool = typer.Option(False, "--json", help="Print the full report as JSON to stdout (for CI)"),
    include_tests: bool = typer.Option(False, "--include-tests", help="Also analyze test files"),
    include_benches: bool = typer.Option(False, "--include-benches", help="Also analyze benchmark files"),
    include_examples: bool = typer.Option(False, "--include-examples", help="Also analyze example files"),
    max_file_size: Optional[int] = typer.Option(None, "--max-file-size", help="Skip files larger than N bytes"),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", help="Analyze files in N worker processes"),
    fail_on: Optional[RiskLevel] = typer.Option(
        None, "--fail-on", help="Exit with code 2 when the verdict is at or above this level"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show per-function tables and debug logs"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress all output except errors"),
) -> None:
    """Analyze a smart-contract source tree and print the risk verdict.

    Walks every .rs file under PATH (skipping target/, tests, benches and
    examples by default), scores arithmetic safety, control flow and CPI
    usage, and rolls them up into a low/medium/high/critical verdict.
    """
    _configure_logging(verbose, quiet or output_json)

    started = time.monotonic()
    try:
        cfg = apply_overrides(
            _load_base_config(config),
            root_path=path,
            include_tests=include_tests or None,
            include_benches=include_benches or None,
            include_examples=include_examples or None,
            max_file_size=max_file_size,
            workers=workers,
        )
        if output_format is not None:
            cfg = cfg.model_copy(update={"output": cfg.output.model_copy(update={"format": output_format})})

        engine = AnalyzerEngine(cfg)
        repo = engine.analyze_repository()
    except BulwarkError as e:
        _fail(e)

    duration_ms = int((time.monotonic() - started) * 1000)
    report = build_report(repo, cfg, engine.registry, duration_ms=duration_ms)

    if output:
        write_report(report, Path(output), cfg.output.format, cfg.output.pretty)
    if output_json:
        print(to_canonical_json(report), end="")
    elif output:
        if not quiet:
            console.print(f"[dim]Report written to {output}[/dim]")
    elif not quiet:
        print_full_report(report, verbose=verbose)

    level = repo.risk_summary.risk_level
    if fail_on is not None and level.rank >= fail_on.rank:
        if not quiet and not output_json:
            console.print(f"[red]Risk level {level.value} is at or above --fail-on {fail_on.value}[/red]")
        raise typer.Exit(code=EXIT_RISK_GATE)


@app.command(name="file")
def analyze_file(
    path: str = typer.Argument(..., help="Rust source file to analyze"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="YAML configuration file"),
    output_format: Optional[OutputFormat] = typer.Option(None, "--format", "-f", help="Print the record as json or yaml"),
    output_json: bool = typer.Option(False, "--json", help="Print the record as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logs"),
) -> None:
    """Analyze a single Rust file and print its function metrics."""
    _configure_logging(verbose, output_json or output_format is not None)

    try:
        engine = AnalyzerEngine(_load_base_config(config))
        record = engine.analyze_single_file(path)
    except BulwarkError as e:
        _fail(e)

    if output_json:
        print(render(record, OutputFormat.JSON), end="")
    elif output_format is not None:
        print(render(record, output_format), end="")
    else:
        print_file_record(record)


@app.command(name="config")
def check_config(
    path: Optional[str] = typer.Argument(None, help="Configuration file to validate (omit to print the defaults)"),
) -> None:
    """Validate a configuration file, or print the default configuration."""
    if path is None:
        print(dump_config(AnalyzerConfig()), end="")
        return

    try:
        cfg = load_config(path)
        if cfg.analysis.pattern_registry:
            load_registry(cfg.analysis.pattern_registry)
    except BulwarkError as e:
        _fail(e)

    console.print(f"[green]Configuration is valid:[/green] {path}")


@app.command()
def patterns(
    registry: Optional[str] = typer.Option(None, "--registry", help="Custom pattern registry YAML"),
    output_json: bool = typer.Option(False, "--json", help="Print the registry as JSON"),
) -> None:
    """List the semantic patterns used to tag functions and files."""
    try:
        table = load_registry(registry)
    except BulwarkError as e:
        _fail(e)

    if output_json:
        print(to_canonical_json({"patterns": [d.model_dump(mode="json") for d in table]}), end="")
    else:
        print_pattern_registry(table)


@app.command()
def version() -> None:
    """Show the Bulwark version."""
    console.print(f"Bulwark v{__version__}")


if __name__ == "__main__":
    app()
