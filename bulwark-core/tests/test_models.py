"""Tests for the metric and factor data models."""

import pytest
from pydantic import ValidationError

from bulwark.models.factors import (
    CallClassificationProfile,
    FactorReport,
    FunctionVisibilityProfile,
    LinesOfCodeProfile,
)
from bulwark.models.metrics import (
    ArithmeticProfile,
    ControlFlowProfile,
    FunctionRecord,
    MathFunctionProfile,
    RiskLevel,
    SafetyProfile,
)


class TestArithmeticProfile:
    """Counter sums and the safety ratio."""

    def test_total_ops_is_sum_of_every_counter(self):
        names = list(ArithmeticProfile.model_fields)
        values = {name: i + 1 for i, name in enumerate(names)}
        profile = ArithmeticProfile(**values)
        assert profile.total_ops() == sum(values.values())

    def test_safe_ops_counts_checked_and_saturating(self):
        profile = ArithmeticProfile(checked_rem=1, checked_pow=2, saturating_sub=3, wrapping_add=4, raw_add=5)
        assert profile.safe_ops() == 6
        assert profile.total_ops() == 15

    def test_ratio_is_one_without_operations(self):
        assert ArithmeticProfile().safe_ops_ratio() == 1.0

    def test_ratio_two_thirds(self):
        profile = ArithmeticProfile(checked_add=2, raw_add=1)
        assert profile.safe_ops_ratio() == pytest.approx(2 / 3)

    def test_ratio_within_bounds(self):
        for checked, raw in [(0, 5), (5, 0), (3, 7), (1, 1)]:
            ratio = ArithmeticProfile(checked_mul=checked, raw_mul=raw).safe_ops_ratio()
            assert 0.0 <= ratio <= 1.0


class TestOtherProfiles:
    """Math, control flow and safety profiles."""

    def test_math_total_calls(self):
        profile = MathFunctionProfile(sqrt=1, pow=2, min_max=3, trig_functions=1)
        assert profile.total_calls() == 7

    def test_cyclomatic_complexity_defaults_to_one(self):
        assert ControlFlowProfile().cyclomatic_complexity == 1

    def test_cyclomatic_complexity_below_one_rejected(self):
        with pytest.raises(ValidationError):
            ControlFlowProfile(cyclomatic_complexity=0)

    def test_unsafe_ops_excludes_expect_and_todo(self):
        safety = SafetyProfile(unsafe_blocks=1, unwrap_calls=2, panic_calls=3, expect_calls=4, todo_calls=5)
        assert safety.unsafe_ops == 6


class TestRiskLevel:
    def test_ranks_are_ordered(self):
        levels = [RiskLevel.LOW, RiskLevel.MEDIUM, RiskLevel.HIGH, RiskLevel.CRITICAL]
        assert [level.rank for level in levels] == [0, 1, 2, 3]

    def test_values_are_lowercase_names(self):
        assert RiskLevel("critical") is RiskLevel.CRITICAL


class TestFunctionRecord:
    def test_dump_is_plain_document(self):
        record = FunctionRecord(name="swap", line_range=(3, 9))
        data = record.model_dump(mode="json")
        assert data["line_range"] == [3, 9]
        assert data["control_flow"]["cyclomatic_complexity"] == 1
        assert data["arithmetic"]["checked_add"] == 0
        assert data["semantic_tags"] == []


class TestFactorMerge:
    """Factor profiles merge associatively and commutatively."""

    def _calls(self, targets, total, signed):
        return CallClassificationProfile(
            total_calls=total,
            signed_calls=signed,
            unsigned_calls=total - signed,
            token_program_calls=total,
            program_targets=targets,
        ).scored()

    def test_call_profile_score(self):
        profile = self._calls(["token_program", "system_program"], total=5, signed=3)
        assert profile.distinct_targets == 2
        assert profile.complexity_score == pytest.approx(10.0)
        assert profile.factor == pytest.approx(33.33, abs=0.01)

    def test_call_profile_empty_scores_zero(self):
        profile = CallClassificationProfile().scored()
        assert profile.complexity_score == 0.0
        assert profile.factor == 0.0

    def test_call_factor_capped_at_100(self):
        targets = ["a", "b", "c", "d", "e", "f", "g", "h", "i", "j", "k", "l"]
        assert self._calls(targets, total=1, signed=1).factor == 100.0

    def test_call_merge_unions_targets(self):
        a = self._calls(["token_program"], total=2, signed=2)
        b = self._calls(["native_invoke", "token_program"], total=1, signed=0)
        merged = a.merge(b)
        assert merged.program_targets == ["native_invoke", "token_program"]
        assert merged.total_calls == 3
        assert merged.signed_calls == 2
        assert merged.complexity_score == pytest.approx(2 * 2.0 + (2 / 3) * 10.0)

    def test_merge_is_commutative_and_associative(self):
        reports = [
            FactorReport(
                call_classification=self._calls(["token_program"], 1, 1),
                function_visibility=FunctionVisibilityProfile(total_functions=4, public_functions=4, free_functions=4),
                lines_of_code=LinesOfCodeProfile(lines_of_code=10, files_counted=1),
            ),
            FactorReport(
                call_classification=self._calls(["system_program"], 2, 0),
                function_visibility=FunctionVisibilityProfile(total_functions=3, private_functions=3, free_functions=3),
                lines_of_code=LinesOfCodeProfile(lines_of_code=7, files_counted=1),
            ),
            FactorReport(),
        ]
        a, b, c = reports
        assert a.merge(b) == b.merge(a)
        assert a.merge(b).merge(c) == a.merge(b.merge(c))

    def test_visibility_factor_recomputed_after_merge(self):
        a = FunctionVisibilityProfile(total_functions=4).scored()
        b = FunctionVisibilityProfile(total_functions=75).scored()
        assert a.function_factor == 0.0
        merged = a.merge(b)
        assert merged.total_functions == 79
        assert merged.function_factor == 25.08
