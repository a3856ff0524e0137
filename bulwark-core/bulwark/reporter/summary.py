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

"""Report shaping: rank files and functions, derive insights."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from bulwark import __version__
from bulwark.models.config import AnalyzerConfig
from bulwark.models.metrics import RepositoryMetrics
from bulwark.models.report import (
    AnalysisReport,
    ConfigSummary,
    FileComplexity,
    FunctionComplexity,
    OperationBreakdown,
    PatternCount,
    ReportMetadata,
    SummaryStats,
)
from bulwark.scanner.pattern_detector import PatternRegistry

TOP_N = 10

# Insight thresholds
INSIGHT_SAFETY_RATIO = 0.8
INSIGHT_AVG_COMPLEXITY = 10.0
INSIGHT_UNSAFE_OPS = 20


def build_summary(repo: RepositoryMetrics, registry: Optional[PatternRegistry] = None) -> SummaryStats:
    breakdown = OperationBreakdown()
    file_rows: list[FileComplexity] = []
    function_rows: list[tuple[int, FunctionComplexity]] = []

    for file_record in repo.files:
        file_rows.append(
            FileComplexity(
                path=file_record.path,
                complexity_score=file_record.aggregated.complexity_score,
                function_count=file_record.function_count,
                lines_of_code=file_record.lines_of_code,
            )
        )
        for func in file_record.functions:
            arith = func.arithmetic
            function_rows.append(
                (
                    func.line_range[0],
                    FunctionComplexity(
                        name=func.name,
                        file_path=file_record.path,
                        complexity_score=func.complexity_score,
                        cyclomatic_complexity=func.control_flow.cyclomatic_complexity,
                        total_operations=arith.total_ops() + func.math_functions.total_calls(),
                    ),
                )
            )
            breakdown.checked_arithmetic += (
                arith.checked_add
                + arith.checked_sub
                + arith.checked_mul
                + arith.checked_div
                + arith.checked_rem
                + arith.checked_pow
            )
            breakdown.math_functions += func.math_functions.total_calls()
            breakdown.raw_arithmetic += arith.raw_add + arith.raw_sub + arith.raw_mul + arith.raw_div + arith.raw_rem
            breakdown.control_flow += func.control_flow.cyclomatic_complexity
            breakdown.unsafe_operations += func.safety.unsafe_ops

    # Highest score first; ties by path, then position
    file_rows.sort(key=lambda row: (-row.complexity_score, row.path))
    function_rows.sort(key=lambda item: (-item[1].complexity_score, item[1].file_path, item[0], item[1].name))

    patterns = sorted(repo.semantic_patterns.items(), key=lambda item: (-item[1], item[0]))[:TOP_N]
    top_patterns = []
    for pattern_id, count in patterns:
        definition = registry.get(pattern_id) if registry else None
        top_patterns.append(
            PatternCount(
                pattern=pattern_id,
                count=count,
                description=definition.description if definition else "",
            )
        )

    insights = []
    if repo.aggregated.safety_ratio < INSIGHT_SAFETY_RATIO:
        insights.append("Consider increasing the use of checked arithmetic operations for better safety")
    if repo.aggregated.avg_cyclomatic_complexity > INSIGHT_AVG_COMPLEXITY:
        insights.append("Some functions have high cyclomatic complexity - consider refactoring")
    if breakdown.unsafe_operations > INSIGHT_UNSAFE_OPS:
        insights.append("High number of potentially unsafe operations detected")

    return SummaryStats(
        total_complexity_operations=(
            breakdown.checked_arithmetic + breakdown.math_functions + breakdown.raw_arithmetic
        ),
        operation_breakdown=breakdown,
        top_semantic_patterns=top_patterns,
        highest_complexity_files=file_rows[:TOP_N],
        highest_complexity_functions=[row for _, row in function_rows[:TOP_N]],
        insights=insights,
    )


def build_report(
    repo: RepositoryMetrics,
    config: AnalyzerConfig,
    registry: Optional[PatternRegistry] = None,
    duration_ms: int = 0,
) -> AnalysisReport:
    """Wrap repository metrics into a full report."""
    summary = build_summary(repo, registry)
    if not config.output.include_function_details:
        repo = repo.model_copy(
            update={"files": [f.model_copy(update={"functions": []}) for f in repo.files]}
        )
    metadata = ReportMetadata(
        version=__version__,
        timestamp=datetime.now(timezone.utc).isoformat(),
        config_summary=ConfigSummary(
            included_tests=config.include_tests,
            included_benches=config.include_benches,
            included_examples=config.include_examples,
            max_file_size=config.max_file_size,
            exclude_pattern_count=len(config.exclude_patterns),
        ),
        duration_ms=duration_ms,
    )
    return AnalysisReport(metadata=metadata, repository=repo, summary=summary)
