"""Tests for metric aggregation and risk assessment."""

from fractions import Fraction
from itertools import permutations

import pytest

from bulwark.models.metrics import (
    AggregatedProfile,
    ArithmeticProfile,
    ControlFlowProfile,
    FunctionRecord,
    RiskLevel,
    SafetyProfile,
)
from bulwark.scanner.aggregation import (
    MetricsAccumulator,
    aggregate_functions,
    aggregate_profiles,
    assess_risk,
    band_risk_score,
)


def _function(name, cc=1, checked=0, raw=0, unwraps=0):
    return FunctionRecord(
        name=name,
        line_range=(1, 1),
        arithmetic=ArithmeticProfile(checked_add=checked, raw_add=raw),
        control_flow=ControlFlowProfile(cyclomatic_complexity=cc, decision_points=cc - 1),
        safety=SafetyProfile(unwrap_calls=unwraps),
    )


class TestAggregateFunctions:
    """File-level folding of function records."""

    def test_empty_file(self):
        profile = aggregate_functions([])
        assert profile.function_count == 0
        assert profile.avg_cyclomatic_complexity == 0.0
        assert profile.max_cyclomatic_complexity == 0
        assert profile.safety_ratio == 1.0
        assert profile.complexity_score == 0.0

    def test_totals_and_averages(self):
        profile = aggregate_functions(
            [_function("a", cc=1, checked=3, raw=1), _function("b", cc=4, raw=4, unwraps=2)]
        )
        assert profile.function_count == 2
        assert profile.total_arithmetic_ops == 8
        assert profile.safe_arithmetic_ops == 3
        assert profile.safety_ratio == pytest.approx(3 / 8)
        assert profile.avg_cyclomatic_complexity == pytest.approx(2.5)
        assert profile.max_cyclomatic_complexity == 4
        assert profile.total_unsafe_ops == 2
        assert profile.complexity_score == pytest.approx(2.5 + 8 * 0.1)


class TestAggregateProfiles:
    """Repository-level folding of file profiles."""

    def test_safety_ratio_weighted_by_operations(self):
        no_arithmetic = AggregatedProfile(function_count=1, avg_cyclomatic_complexity=1.0, max_cyclomatic_complexity=1)
        half_checked = AggregatedProfile(
            function_count=2,
            total_arithmetic_ops=10,
            safe_arithmetic_ops=5,
            safety_ratio=0.5,
            avg_cyclomatic_complexity=2.0,
            max_cyclomatic_complexity=3,
        )
        repo = aggregate_profiles([no_arithmetic, half_checked])
        assert repo.safety_ratio == pytest.approx(0.5)
        assert repo.avg_cyclomatic_complexity == pytest.approx(5 / 3)
        assert repo.max_cyclomatic_complexity == 3
        assert repo.function_count == 3

    def test_max_covers_every_file(self):
        files = [
            aggregate_functions([_function("a", cc=7)]),
            aggregate_functions([_function("b", cc=2), _function("c", cc=9)]),
        ]
        repo = aggregate_profiles(files)
        assert repo.max_cyclomatic_complexity == max(f.max_cyclomatic_complexity for f in files)

    def test_order_independent(self):
        files = [
            aggregate_functions([_function("a", cc=2, checked=1)]),
            aggregate_functions([_function("b", cc=3, raw=2), _function("c", cc=1)]),
            aggregate_functions([_function("d", cc=5, unwraps=4, raw=1)]),
        ]
        results = {aggregate_profiles(order).model_dump_json() for order in permutations(files)}
        assert len(results) == 1

    def test_ratio_alone_weights_the_fold(self):
        no_arithmetic = AggregatedProfile(function_count=1, avg_cyclomatic_complexity=1.0, max_cyclomatic_complexity=1)
        half_checked = AggregatedProfile(
            function_count=1,
            total_arithmetic_ops=10,
            safety_ratio=0.5,
            avg_cyclomatic_complexity=1.0,
            max_cyclomatic_complexity=1,
        )
        repo = aggregate_profiles([no_arithmetic, half_checked])
        assert repo.safety_ratio == pytest.approx(0.5)
        assert repo.safe_arithmetic_ops == 5

    def test_fractional_average_is_kept(self):
        repo = aggregate_profiles(
            [AggregatedProfile(function_count=2, avg_cyclomatic_complexity=1.25, max_cyclomatic_complexity=2)]
        )
        assert repo.avg_cyclomatic_complexity == pytest.approx(1.25)

    def test_average_weighted_by_function_count(self):
        repo = aggregate_profiles(
            [
                AggregatedProfile(function_count=3, avg_cyclomatic_complexity=7 / 3, max_cyclomatic_complexity=4),
                AggregatedProfile(function_count=1, avg_cyclomatic_complexity=5.0, max_cyclomatic_complexity=5),
            ]
        )
        assert repo.avg_cyclomatic_complexity == pytest.approx(3.0)

    def test_profile_roundtrips_through_accumulator(self):
        acc = MetricsAccumulator(
            function_count=2,
            total_arithmetic_ops=8,
            weighted_safe_ops=Fraction(3),
            complexity_sum=Fraction(5),
            max_cyclomatic_complexity=4,
        )
        assert MetricsAccumulator.from_profile(acc.finish()) == acc

    def test_accumulator_merge_is_commutative(self):
        a = MetricsAccumulator.from_function(_function("a", cc=2, checked=1))
        b = MetricsAccumulator.from_function(_function("b", cc=6, raw=3))
        assert a.merge(b) == b.merge(a)


class TestRiskBands:
    @pytest.mark.parametrize(
        "score,level",
        [
            (0.0, RiskLevel.LOW),
            (25.0, RiskLevel.LOW),
            (25.05, RiskLevel.MEDIUM),
            (50.0, RiskLevel.MEDIUM),
            (50.01, RiskLevel.HIGH),
            (75.0, RiskLevel.HIGH),
            (75.1, RiskLevel.CRITICAL),
        ],
    )
    def test_band_edges(self, score, level):
        assert band_risk_score(score) == level


class TestAssessRisk:
    """Threshold checks on repository metrics."""

    def test_clean_repository(self):
        verdict = assess_risk(AggregatedProfile())
        assert verdict.risk_score == 0.0
        assert verdict.risk_level == RiskLevel.LOW
        assert verdict.risk_factors == []
        assert verdict.recommendations == []

    def test_all_thresholds_triggered(self):
        verdict = assess_risk(
            AggregatedProfile(safety_ratio=0.5, avg_cyclomatic_complexity=12.0, total_unsafe_ops=15)
        )
        assert verdict.risk_score == pytest.approx(60.0)
        assert verdict.risk_level == RiskLevel.HIGH
        assert verdict.risk_factors == [
            "Low safety ratio - many unchecked arithmetic operations",
            "High average cyclomatic complexity",
            "High number of potentially unsafe operations",
        ]
        assert len(verdict.recommendations) == 3

    def test_safety_ratio_alone_is_low(self):
        verdict = assess_risk(AggregatedProfile(safety_ratio=0.79))
        assert verdict.risk_score == pytest.approx(20.0)
        assert verdict.risk_level == RiskLevel.LOW

    def test_safety_and_complexity_is_medium(self):
        verdict = assess_risk(AggregatedProfile(safety_ratio=0.1, avg_cyclomatic_complexity=10.5))
        assert verdict.risk_score == pytest.approx(35.0)
        assert verdict.risk_level == RiskLevel.MEDIUM

    def test_thresholds_are_strict(self):
        verdict = assess_risk(
            AggregatedProfile(safety_ratio=0.8, avg_cyclomatic_complexity=10.0, total_unsafe_ops=10)
        )
        assert verdict.risk_score == 0.0
        assert verdict.risk_factors == []
