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

"""Pydantic models for the independent factor analyzers.

Every profile has a ``merge`` that is associative and commutative, so the
repository-level report is the same whatever order files are folded in.
Derived scores are recomputed from the merged counters, never summed.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# Function-visibility factor scales linearly between these function counts
VISIBILITY_FLOOR = 5
VISIBILITY_CEILING = 300

# Call-classification score that maps to a factor of 100
CALL_SCORE_CEILING = 30.0


class CallClassificationProfile(BaseModel):
    """Cross-program invocation calls grouped by target program."""

    total_calls: int = 0
    signed_calls: int = 0
    unsigned_calls: int = 0
    token_program_calls: int = 0
    system_program_calls: int = 0
    associated_token_program_calls: int = 0
    other_program_calls: int = 0
    program_targets: list[str] = Field(default_factory=list)
    distinct_targets: int = 0
    complexity_score: float = 0.0
    factor: float = 0.0

    def scored(self) -> CallClassificationProfile:
        """Return a copy whose derived fields match its counters."""
        targets = sorted(set(self.program_targets))
        ratio = self.signed_calls / self.total_calls if self.total_calls else 0.0
        score = len(targets) * 2.0 + ratio * 10.0
        factor = min(100.0, score / CALL_SCORE_CEILING * 100.0) if score > 0 else 0.0
        return self.model_copy(
            update={
                "program_targets": targets,
                "distinct_targets": len(targets),
                "complexity_score": score,
                "factor": factor,
            }
        )

    def merge(self, other: CallClassificationProfile) -> CallClassificationProfile:
        return CallClassificationProfile(
            total_calls=self.total_calls + other.total_calls,
            signed_calls=self.signed_calls + other.signed_calls,
            unsigned_calls=self.unsigned_calls + other.unsigned_calls,
            token_program_calls=self.token_program_calls + other.token_program_calls,
            system_program_calls=self.system_program_calls + other.system_program_calls,
            associated_token_program_calls=(
                self.associated_token_program_calls + other.associated_token_program_calls
            ),
            other_program_calls=self.other_program_calls + other.other_program_calls,
            program_targets=list(set(self.program_targets) | set(other.program_targets)),
        ).scored()


def visibility_factor(total_functions: int) -> float:
    """Map a function count onto 0-100, rounded to two decimals."""
    if total_functions <= VISIBILITY_FLOOR:
        return 0.0
    if total_functions >= VISIBILITY_CEILING:
        return 100.0
    span = VISIBILITY_CEILING - VISIBILITY_FLOOR
    return round((total_functions - VISIBILITY_FLOOR) / span * 100.0, 2)


class FunctionVisibilityProfile(BaseModel):
    """Public/private and free/associated function counts."""

    total_functions: int = 0
    public_functions: int = 0
    private_functions: int = 0
    free_functions: int = 0
    associated_functions: int = 0
    function_factor: float = 0.0

    def scored(self) -> FunctionVisibilityProfile:
        return self.model_copy(update={"function_factor": visibility_factor(self.total_functions)})

    def merge(self, other: FunctionVisibilityProfile) -> FunctionVisibilityProfile:
        return FunctionVisibilityProfile(
            total_functions=self.total_functions + other.total_functions,
            public_functions=self.public_functions + other.public_functions,
            private_functions=self.private_functions + other.private_functions,
            free_functions=self.free_functions + other.free_functions,
            associated_functions=self.associated_functions + other.associated_functions,
        ).scored()


class LinesOfCodeProfile(BaseModel):
    """Non-blank, non-comment source lines."""

    lines_of_code: int = 0
    files_counted: int = 0

    def merge(self, other: LinesOfCodeProfile) -> LinesOfCodeProfile:
        return LinesOfCodeProfile(
            lines_of_code=self.lines_of_code + other.lines_of_code,
            files_counted=self.files_counted + other.files_counted,
        )


class FactorReport(BaseModel):
    """All factor profiles for one file, or merged for a repository."""

    call_classification: CallClassificationProfile = Field(default_factory=CallClassificationProfile)
    function_visibility: FunctionVisibilityProfile = Field(default_factory=FunctionVisibilityProfile)
    lines_of_code: LinesOfCodeProfile = Field(default_factory=LinesOfCodeProfile)

    def merge(self, other: FactorReport) -> FactorReport:
        return FactorReport(
            call_classification=self.call_classification.merge(other.call_classification),
            function_visibility=self.function_visibility.merge(other.function_visibility),
            lines_of_code=self.lines_of_code.merge(other.lines_of_code),
        )
