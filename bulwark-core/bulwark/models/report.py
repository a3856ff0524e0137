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

"""Pydantic models for the analysis report.

The report wraps ``RepositoryMetrics`` with run metadata and a ranked
summary. Only ``metadata.timestamp`` and ``metadata.duration_ms`` vary
between runs on unchanged input.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from bulwark.models.metrics import RepositoryMetrics


class ConfigSummary(BaseModel):
    """The configuration switches that shaped this run."""

    included_tests: bool = False
    included_benches: bool = False
    included_examples: bool = False
    max_file_size: int = 0
    exclude_pattern_count: int = 0


class ReportMetadata(BaseModel):
    version: str
    timestamp: str  # ISO 8601, UTC
    config_summary: ConfigSummary = Field(default_factory=ConfigSummary)
    duration_ms: int = 0


class OperationBreakdown(BaseModel):
    """Repository-wide operation counts by kind."""

    checked_arithmetic: int = 0
    math_functions: int = 0
    raw_arithmetic: int = 0
    control_flow: int = 0  # sum of cyclomatic complexities
    unsafe_operations: int = 0


class PatternCount(BaseModel):
    pattern: str
    count: int
    description: str = ""


class FileComplexity(BaseModel):
    path: str
    complexity_score: float
    function_count: int
    lines_of_code: int


class FunctionComplexity(BaseModel):
    name: str
    file_path: str
    complexity_score: float
    cyclomatic_complexity: int
    total_operations: int  # arithmetic ops + math calls


class SummaryStats(BaseModel):
    """Ranked highlights derived from the repository metrics."""

    total_complexity_operations: int = 0
    operation_breakdown: OperationBreakdown = Field(default_factory=OperationBreakdown)
    top_semantic_patterns: list[PatternCount] = Field(default_factory=list)
    highest_complexity_files: list[FileComplexity] = Field(default_factory=list)
    highest_complexity_functions: list[FunctionComplexity] = Field(default_factory=list)
    insights: list[str] = Field(default_factory=list)


class AnalysisReport(BaseModel):
    """Complete report: metadata + repository metrics + summary."""

    metadata: ReportMetadata
    repository: RepositoryMetrics
    summary: SummaryStats = Field(default_factory=SummaryStats)
