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

"""Pydantic models for function, file and repository metrics.

Counters are the stored fields; derived values (``total_ops``,
``safe_ops_ratio``, ``total_calls``) are computed on demand so that a
record can never disagree with its own counters.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from bulwark.models.factors import FactorReport

# Counter groups used for the safety ratio
CHECKED_COUNTERS = (
    "checked_add",
    "checked_sub",
    "checked_mul",
    "checked_div",
    "checked_rem",
    "checked_pow",
)
SATURATING_COUNTERS = ("saturating_add", "saturating_sub", "saturating_mul")


class RiskLevel(str, Enum):
    """Discrete risk bands, ordered from least to most severe."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _RISK_RANK[self]


_RISK_RANK = {
    RiskLevel.LOW: 0,
    RiskLevel.MEDIUM: 1,
    RiskLevel.HIGH: 2,
    RiskLevel.CRITICAL: 3,
}


class ArithmeticProfile(BaseModel):
    """Arithmetic operation counts for one function."""

    # Checked operations (overflow-safe)
    checked_add: int = 0
    checked_sub: int = 0
    checked_mul: int = 0
    checked_div: int = 0
    checked_rem: int = 0
    checked_pow: int = 0

    # Saturating operations
    saturating_add: int = 0
    saturating_sub: int = 0
    saturating_mul: int = 0

    # Wrapping operations
    wrapping_add: int = 0
    wrapping_sub: int = 0
    wrapping_mul: int = 0
    wrapping_div: int = 0

    # Raw binary operators
    raw_add: int = 0
    raw_sub: int = 0
    raw_mul: int = 0
    raw_div: int = 0
    raw_rem: int = 0

    # Special operations
    ceil_div: int = 0
    integer_sqrt: int = 0
    bitwise_ops: int = 0

    def total_ops(self) -> int:
        """Sum of every counter."""
        return sum(getattr(self, name) for name in type(self).model_fields)

    def safe_ops(self) -> int:
        """Checked plus saturating operations."""
        return sum(getattr(self, name) for name in CHECKED_COUNTERS + SATURATING_COUNTERS)

    def safe_ops_ratio(self) -> float:
        """Fraction of operations that are checked or saturating (1.0 when there are none)."""
        total = self.total_ops()
        if total == 0:
            return 1.0
        return self.safe_ops() / total


class MathFunctionProfile(BaseModel):
    """Mathematical function call counts."""

    sqrt: int = 0
    pow: int = 0
    exp: int = 0
    log: int = 0
    trig_functions: int = 0
    floor: int = 0
    ceil: int = 0
    round: int = 0
    abs: int = 0
    min_max: int = 0

    def total_calls(self) -> int:
        return sum(getattr(self, name) for name in type(self).model_fields)


class ControlFlowProfile(BaseModel):
    """Branching and nesting metrics. Cyclomatic complexity is never below 1."""

    cyclomatic_complexity: int = Field(default=1, ge=1)
    decision_points: int = 0
    max_loop_depth: int = 0
    loop_count: int = 0
    max_conditional_depth: int = 0
    conditional_count: int = 0


class SafetyProfile(BaseModel):
    """Unsafe code and abort-risk call counts."""

    unsafe_blocks: int = 0
    raw_pointers: int = 0
    unwrap_calls: int = 0
    expect_calls: int = 0
    panic_calls: int = 0
    todo_calls: int = 0

    @property
    def unsafe_ops(self) -> int:
        """Operations counted toward the unsafe-operation total."""
        return self.unsafe_blocks + self.unwrap_calls + self.panic_calls


class FunctionRecord(BaseModel):
    """Metrics for a single function definition."""

    name: str
    signature: str = ""
    line_range: tuple[int, int] = (0, 0)
    arithmetic: ArithmeticProfile = Field(default_factory=ArithmeticProfile)
    math_functions: MathFunctionProfile = Field(default_factory=MathFunctionProfile)
    control_flow: ControlFlowProfile = Field(default_factory=ControlFlowProfile)
    safety: SafetyProfile = Field(default_factory=SafetyProfile)
    semantic_tags: list[str] = Field(default_factory=list)
    complexity_score: float = 0.0


class AggregatedProfile(BaseModel):
    """Roll-up of function metrics, used for both files and the repository."""

    function_count: int = 0
    total_arithmetic_ops: int = 0
    safe_arithmetic_ops: int = 0
    total_math_functions: int = 0
    avg_cyclomatic_complexity: float = 0.0
    max_cyclomatic_complexity: int = 0
    total_unsafe_ops: int = 0
    safety_ratio: float = Field(default=1.0, ge=0.0, le=1.0)
    complexity_score: float = 0.0


class FileRecord(BaseModel):
    """Metrics for one successfully analyzed source file."""

    path: str
    lines_of_code: int = 0
    function_count: int = 0
    functions: list[FunctionRecord] = Field(default_factory=list)
    aggregated: AggregatedProfile = Field(default_factory=AggregatedProfile)
    semantic_tags: list[str] = Field(default_factory=list)
    factors: FactorReport = Field(default_factory=FactorReport)


class RiskVerdict(BaseModel):
    """Banded risk outcome with the factors that triggered it."""

    risk_level: RiskLevel = RiskLevel.LOW
    risk_factors: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    risk_score: float = 0.0


class PatternRisk(BaseModel):
    """Qualitative risk derived from the detected semantic patterns."""

    risk_level: RiskLevel = RiskLevel.LOW
    risk_factors: list[str] = Field(default_factory=list)
    pattern_score: int = 0


class FailureKind(str, Enum):
    """Why a file was skipped."""

    PARSE = "parse"
    IO = "io"


class FileFailure(BaseModel):
    """A file that was skipped; it contributes nothing to the totals."""

    path: str
    kind: FailureKind
    message: str


class RepositoryMetrics(BaseModel):
    """Repository-wide analysis result handed to the output layer."""

    root_path: str
    file_count: int = 0
    total_lines_of_code: int = 0
    total_function_count: int = 0
    files: list[FileRecord] = Field(default_factory=list)
    aggregated: AggregatedProfile = Field(default_factory=AggregatedProfile)
    semantic_patterns: dict[str, int] = Field(default_factory=dict)
    pattern_risk: PatternRisk = Field(default_factory=PatternRisk)
    factors: FactorReport = Field(default_factory=FactorReport)
    risk_summary: RiskVerdict = Field(default_factory=RiskVerdict)
    failures: list[FileFailure] = Field(default_factory=list)
