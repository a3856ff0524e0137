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

"""Aggregation and risk assessment.

Function metrics fold into file profiles, file profiles into the
repository profile. Folding goes through ``MetricsAccumulator``, which
keeps exact (``Fraction``) numerators and integer denominators and only
divides in ``finish()``, so the result does not depend on file order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from fractions import Fraction

from bulwark.models.metrics import (
    AggregatedProfile,
    FunctionRecord,
    RiskLevel,
    RiskVerdict,
)

logger = logging.getLogger(__name__)

# Composite complexity score weights
ARITHMETIC_SCORE_WEIGHT = 0.1
MATH_SCORE_WEIGHT = 0.2

# Risk thresholds and their score contributions
SAFETY_RATIO_THRESHOLD = 0.8
SAFETY_RATIO_PENALTY = 20.0
AVG_COMPLEXITY_THRESHOLD = 10.0
AVG_COMPLEXITY_PENALTY = 15.0
UNSAFE_OPS_THRESHOLD = 10
UNSAFE_OPS_PENALTY = 25.0

# Inclusive upper bound of each band; anything above the last is critical
RISK_BANDS = (
    (25.0, RiskLevel.LOW),
    (50.0, RiskLevel.MEDIUM),
    (75.0, RiskLevel.HIGH),
)


@dataclass(frozen=True)
class MetricsAccumulator:
    """Order-independent running totals for an ``AggregatedProfile``."""

    function_count: int = 0
    total_arithmetic_ops: int = 0
    weighted_safe_ops: Fraction = Fraction(0)
    total_math_functions: int = 0
    total_unsafe_ops: int = 0
    complexity_sum: Fraction = Fraction(0)
    max_cyclomatic_complexity: int = 0

    @classmethod
    def from_function(cls, record: FunctionRecord) -> MetricsAccumulator:
        cc = record.control_flow.cyclomatic_complexity
        return cls(
            function_count=1,
            total_arithmetic_ops=record.arithmetic.total_ops(),
            weighted_safe_ops=Fraction(record.arithmetic.safe_ops()),
            total_math_functions=record.math_functions.total_calls(),
            total_unsafe_ops=record.safety.unsafe_ops,
            complexity_sum=Fraction(cc),
            max_cyclomatic_complexity=cc,
        )

    @classmethod
    def from_profile(cls, profile: AggregatedProfile) -> MetricsAccumulator:
        """Rebuild totals from an already aggregated profile.

        The safe count is weighted from ``safety_ratio`` and the complexity
        sum from the average, so profiles built from ratios alone fold the
        same way as profiles built from counters.
        """
        ops = profile.total_arithmetic_ops
        return cls(
            function_count=profile.function_count,
            total_arithmetic_ops=ops,
            weighted_safe_ops=Fraction(profile.safety_ratio) * ops,
            total_math_functions=profile.total_math_functions,
            total_unsafe_ops=profile.total_unsafe_ops,
            complexity_sum=Fraction(profile.avg_cyclomatic_complexity) * profile.function_count,
            max_cyclomatic_complexity=profile.max_cyclomatic_complexity,
        )

    def merge(self, other: MetricsAccumulator) -> MetricsAccumulator:
        return MetricsAccumulator(
            function_count=self.function_count + other.function_count,
            total_arithmetic_ops=self.total_arithmetic_ops + other.total_arithmetic_ops,
            weighted_safe_ops=self.weighted_safe_ops + other.weighted_safe_ops,
            total_math_functions=self.total_math_functions + other.total_math_functions,
            total_unsafe_ops=self.total_unsafe_ops + other.total_unsafe_ops,
            complexity_sum=self.complexity_sum + other.complexity_sum,
            max_cyclomatic_complexity=max(self.max_cyclomatic_complexity, other.max_cyclomatic_complexity),
        )

    def finish(self) -> AggregatedProfile:
        avg = float(self.complexity_sum / self.function_count) if self.function_count else 0.0
        if self.total_arithmetic_ops:
            safety_ratio = float(self.weighted_safe_ops / self.total_arithmetic_ops)
        else:
            safety_ratio = 1.0
        return AggregatedProfile(
            function_count=self.function_count,
            total_arithmetic_ops=self.total_arithmetic_ops,
            safe_arithmetic_ops=round(self.weighted_safe_ops),
            total_math_functions=self.total_math_functions,
            avg_cyclomatic_complexity=avg,
            max_cyclomatic_complexity=self.max_cyclomatic_complexity,
            total_unsafe_ops=self.total_unsafe_ops,
            safety_ratio=safety_ratio,
            complexity_score=(
                avg
                + self.total_arithmetic_ops * ARITHMETIC_SCORE_WEIGHT
                + self.total_math_functions * MATH_SCORE_WEIGHT
            ),
        )


def aggregate_functions(functions: Iterable[FunctionRecord]) -> AggregatedProfile:
    """File-level profile from the functions of one file."""
    acc = MetricsAccumulator()
    for record in functions:
        acc = acc.merge(MetricsAccumulator.from_function(record))
    return acc.finish()


def aggregate_profiles(profiles: Iterable[AggregatedProfile]) -> AggregatedProfile:
    """Repository-level profile from file-level profiles.

    Average complexity is weighted by function count and the safety
    ratio by arithmetic operation count, so files without functions or
    arithmetic carry no weight.
    """
    acc = MetricsAccumulator()
    for profile in profiles:
        acc = acc.merge(MetricsAccumulator.from_profile(profile))
    return acc.finish()


def band_risk_score(score: float) -> RiskLevel:
    for upper, level in RISK_BANDS:
        if score <= upper:
            return level
    return RiskLevel.CRITICAL


def assess_risk(aggregated: AggregatedProfile) -> RiskVerdict:
    """Score repository metrics against fixed thresholds."""
    score = 0.0
    factors: list[str] = []
    recommendations: list[str] = []

    if aggregated.safety_ratio < SAFETY_RATIO_THRESHOLD:
        factors.append("Low safety ratio - many unchecked arithmetic operations")
        recommendations.append("Consider using more checked arithmetic operations")
        score += SAFETY_RATIO_PENALTY

    if aggregated.avg_cyclomatic_complexity > AVG_COMPLEXITY_THRESHOLD:
        factors.append("High average cyclomatic complexity")
        recommendations.append("Consider breaking down complex functions")
        score += AVG_COMPLEXITY_PENALTY

    if aggregated.total_unsafe_ops > UNSAFE_OPS_THRESHOLD:
        factors.append("High number of potentially unsafe operations")
        recommendations.append("Review unwrap() and panic!() usage")
        score += UNSAFE_OPS_PENALTY

    level = band_risk_score(score)
    logger.debug("Risk score %.1f -> %s", score, level.value)
    return RiskVerdict(
        risk_level=level,
        risk_factors=factors,
        recommendations=recommendations,
        risk_score=score,
    )
