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

"""Rich terminal output for analysis results.

The default view is a briefing: verdict, where the complexity lives and
what to look at first. Per-function tables appear with --verbose.
"""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from bulwark.models.metrics import FileFailure, FileRecord, RiskLevel, RiskVerdict
from bulwark.models.report import AnalysisReport
from bulwark.scanner.pattern_detector import PatternRegistry


def _make_console() -> Console:
    """Console with soft wrap, sized to the live terminal."""
    return Console(soft_wrap=True)


console = _make_console()

_LEVEL_STYLES = {
    RiskLevel.LOW: "green",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.HIGH: "dark_orange",
    RiskLevel.CRITICAL: "red",
}


def _risk_bar(score: float, style: str) -> Text:
    """Twenty-cell bar for a 0-100 score."""
    filled = min(20, int(score // 5))
    bar = Text()
    bar.append("#" * filled, style=style)
    bar.append("-" * (20 - filled), style="dim")
    return bar


def print_risk_verdict(verdict: RiskVerdict, title: str = "Risk Verdict") -> None:
    style = _LEVEL_STYLES[verdict.risk_level]
    body = Text("  ")
    body.append_text(_risk_bar(verdict.risk_score, style))
    body.append(f"  {verdict.risk_score:.0f}/100  {verdict.risk_level.value.upper()}", style=f"bold {style}")

    for factor, recommendation in zip(verdict.risk_factors, verdict.recommendations):
        body.append(f"\n\n  - {factor}", style=style)
        body.append(f"\n    {recommendation}", style="dim")
    if not verdict.risk_factors:
        body.append("\n\n  No risk thresholds triggered.", style="dim")

    console.print(Panel(body, title=f"[bold {style}]{title}[/bold {style}]", border_style=style, safe_box=True))


def print_overview(report: AnalysisReport) -> None:
    repo = report.repository
    agg = repo.aggregated
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="dim")
    table.add_column()
    table.add_row("Root", repo.root_path)
    table.add_row("Files", f"{repo.file_count} analyzed, {len(repo.failures)} skipped")
    table.add_row("Lines of code", str(repo.total_lines_of_code))
    table.add_row("Functions", str(repo.total_function_count))
    table.add_row("Arithmetic ops", f"{agg.total_arithmetic_ops} ({agg.safety_ratio:.0%} checked/saturating)")
    table.add_row("Cyclomatic complexity", f"avg {agg.avg_cyclomatic_complexity:.2f}, max {agg.max_cyclomatic_complexity}")
    table.add_row("Unsafe operations", str(agg.total_unsafe_ops))
    cpi = repo.factors.call_classification
    table.add_row("CPI calls", f"{cpi.total_calls} ({cpi.signed_calls} signed) across {cpi.distinct_targets} targets")
    pattern_style = _LEVEL_STYLES[repo.pattern_risk.risk_level]
    table.add_row("Pattern risk", Text(repo.pattern_risk.risk_level.value.upper(), style=pattern_style))
    console.print(Panel(table, title="[bold cyan]Bulwark Analysis[/bold cyan]", border_style="cyan", safe_box=True))


def print_top_files(report: AnalysisReport) -> None:
    rows = report.summary.highest_complexity_files
    if not rows:
        return
    table = Table(title="Highest complexity files", title_justify="left")
    table.add_column("File", no_wrap=True)
    table.add_column("Score", justify="right")
    table.add_column("Functions", justify="right")
    table.add_column("LOC", justify="right")
    for row in rows:
        table.add_row(row.path, f"{row.complexity_score:.2f}", str(row.function_count), str(row.lines_of_code))
    console.print(table)


def print_top_functions(report: AnalysisReport) -> None:
    rows = report.summary.highest_complexity_functions
    if not rows:
        return
    table = Table(title="Highest complexity functions", title_justify="left")
    table.add_column("Function", no_wrap=True)
    table.add_column("File", no_wrap=True)
    table.add_column("Score", justify="right")
    table.add_column("CC", justify="right")
    table.add_column("Ops", justify="right")
    for row in rows:
        table.add_row(
            row.name,
            row.file_path,
            f"{row.complexity_score:.2f}",
            str(row.cyclomatic_complexity),
            str(row.total_operations),
        )
    console.print(table)


def print_failures(failures: list[FileFailure]) -> None:
    if not failures:
        return
    console.print(f"[yellow]{len(failures)} file(s) skipped:[/yellow]")
    for failure in failures:
        line = Text("  ")
        line.append(failure.kind.value, style="yellow")
        line.append(f" {failure.path}: ")
        line.append(failure.message, style="dim")
        console.print(line)


def print_file_record(record: FileRecord) -> None:
    """Per-function table for one file."""
    table = Table(title=f"{record.path} ({record.lines_of_code} LOC)", title_justify="left")
    table.add_column("Function", no_wrap=True)
    table.add_column("Lines")
    table.add_column("CC", justify="right")
    table.add_column("Arith", justify="right")
    table.add_column("Safe %", justify="right")
    table.add_column("Unsafe", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("Tags", style="dim")
    for func in record.functions:
        start, end = func.line_range
        table.add_row(
            func.name,
            f"{start}-{end}",
            str(func.control_flow.cyclomatic_complexity),
            str(func.arithmetic.total_ops()),
            f"{func.arithmetic.safe_ops_ratio():.0%}",
            str(func.safety.unsafe_ops),
            f"{func.complexity_score:.2f}",
            ", ".join(func.semantic_tags),
        )
    console.print(table)


def print_full_report(report: AnalysisReport, verbose: bool = False) -> None:
    console.print()
    print_overview(report)
    print_risk_verdict(report.repository.risk_summary)
    print_top_files(report)
    print_top_functions(report)
    for insight in report.summary.insights:
        console.print(f"[cyan]>[/cyan] {insight}")
    if verbose:
        for record in report.repository.files:
            print_file_record(record)
    print_failures(report.repository.failures)


def print_pattern_registry(registry: PatternRegistry) -> None:
    table = Table(title="Semantic patterns", title_justify="left")
    table.add_column("ID", style="bold")
    table.add_column("Risk")
    table.add_column("Keywords")
    table.add_column("Function globs")
    for definition in registry:
        table.add_row(
            definition.id,
            Text(definition.risk_level.value, style=_LEVEL_STYLES[definition.risk_level]),
            ", ".join(definition.keywords),
            ", ".join(definition.function_patterns),
        )
    console.print(table)
