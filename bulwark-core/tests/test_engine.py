"""Tests for the analysis engine and single-file analysis."""

from pathlib import Path

import pytest

from bulwark.errors import ConfigurationFailure, ParseFailure, SingleFileModeFailure
from bulwark.models.config import AnalysisConfig, AnalyzerConfig
from bulwark.models.metrics import FailureKind, RiskLevel
from bulwark.reporter.json_out import to_canonical_json
from bulwark.scanner.engine import AnalyzerEngine
from bulwark.scanner.file_analyzer import analyze_source
from bulwark.scanner.pattern_detector import load_registry

FIXTURES = Path(__file__).parent / "fixtures"

GOOD = """
pub fn swap_tokens(a: u64, b: u64) -> u64 {
    let total = a.checked_add(b).unwrap();
    if total > 10 { total - 1 } else { total }
}
"""

BROKEN = "pub fn broken( -> u64 {\n    let x = ;\n}\n"


@pytest.fixture(scope="module")
def amm_repo():
    return AnalyzerEngine(AnalyzerConfig(root_path=str(FIXTURES / "amm_pool"))).analyze_repository()


class TestAnalyzeSource:
    """Single source text to FileRecord."""

    def test_file_record(self):
        record = analyze_source("src/lib.rs", GOOD, load_registry())
        assert record.path == "src/lib.rs"
        assert record.function_count == 1
        assert record.functions[0].semantic_tags == ["constant_product_amm", "token_swap"]
        assert record.aggregated.total_arithmetic_ops == 2
        assert record.factors.lines_of_code.lines_of_code == record.lines_of_code
        assert "token_swap" in record.semantic_tags

    def test_parse_failure(self):
        with pytest.raises(ParseFailure, match="syntax error near line"):
            analyze_source("bad.rs", BROKEN)

    def test_stage_switches(self):
        analysis = AnalysisConfig(semantic_patterns=False, complexity_scoring=False, factor_analysis=False)
        record = analyze_source("src/lib.rs", GOOD, load_registry(), analysis)
        assert record.semantic_tags == []
        assert record.functions[0].semantic_tags == []
        assert record.functions[0].complexity_score == 0.0
        assert record.factors.function_visibility.total_functions == 0
        assert record.factors.lines_of_code.files_counted == 0


class TestAnalyzeSources:
    """Failures are recorded, never fatal."""

    def test_parse_failure_recorded(self):
        engine = AnalyzerEngine()
        repo = engine.analyze_sources([("a.rs", GOOD), ("b.rs", BROKEN)])
        assert repo.file_count == 1
        assert [f.path for f in repo.files] == ["a.rs"]
        assert len(repo.failures) == 1
        assert repo.failures[0].path == "b.rs"
        assert repo.failures[0].kind == FailureKind.PARSE

    def test_empty_input(self):
        repo = AnalyzerEngine().analyze_sources([])
        assert repo.file_count == 0
        assert repo.aggregated.safety_ratio == 1.0
        assert repo.risk_summary.risk_level == RiskLevel.LOW

    def test_order_of_sources_does_not_change_totals(self):
        engine = AnalyzerEngine()
        other = "fn helper(x: u64) -> u64 { x * 3 }"
        forward = engine.analyze_sources([("a.rs", GOOD), ("b.rs", other)])
        backward = engine.analyze_sources([("b.rs", other), ("a.rs", GOOD)])
        assert forward.aggregated == backward.aggregated
        assert forward.factors == backward.factors
        assert forward.risk_summary == backward.risk_summary

    def test_idempotent(self):
        engine = AnalyzerEngine()
        first = engine.analyze_sources([("a.rs", GOOD)], root_path="repo")
        second = engine.analyze_sources([("a.rs", GOOD)], root_path="repo")
        assert to_canonical_json(first) == to_canonical_json(second)

    def test_disabled_risk_and_patterns(self):
        config = AnalyzerConfig(analysis=AnalysisConfig(risk_assessment=False, semantic_patterns=False))
        repo = AnalyzerEngine(config).analyze_sources([("a.rs", "fn f(a: u64) -> u64 { a + 1 }")])
        assert repo.risk_summary.risk_score == 0.0
        assert repo.risk_summary.risk_factors == []
        assert repo.semantic_patterns == {}
        assert repo.pattern_risk.pattern_score == 0


class TestAnalyzeRepository:
    """Discovery, reading and folding over the AMM fixture."""

    def test_discovers_program_sources_only(self, amm_repo):
        assert [f.path for f in amm_repo.files] == [
            "programs/amm_pool/src/lib.rs",
            "programs/amm_pool/src/math.rs",
        ]
        assert amm_repo.total_function_count == 5
        assert amm_repo.failures == []

    def test_function_metrics(self, amm_repo):
        lib = amm_repo.files[0]
        swap, add = lib.functions
        assert swap.name == "swap_exact_in"
        assert swap.arithmetic.checked_sub == 2
        assert swap.arithmetic.raw_div == 1
        assert swap.safety.unwrap_calls == 4
        assert swap.control_flow.cyclomatic_complexity == 2
        assert add.name == "add_liquidity"
        assert add.arithmetic.raw_add == 2
        assert add.control_flow.cyclomatic_complexity == 3
        assert add.control_flow.max_conditional_depth == 1

    def test_semantic_pattern_counts(self, amm_repo):
        assert amm_repo.semantic_patterns == {
            "constant_product_amm": 3,
            "invariant_maintenance": 1,
            "liquidity_management": 1,
            "precision_handling": 1,
            "token_swap": 1,
        }

    def test_repository_aggregate_and_risk(self, amm_repo):
        agg = amm_repo.aggregated
        assert agg.total_arithmetic_ops == 13
        assert agg.safe_arithmetic_ops == 7
        assert agg.avg_cyclomatic_complexity == pytest.approx(2.4)
        assert agg.max_cyclomatic_complexity == 5
        assert agg.total_unsafe_ops == 6
        assert amm_repo.risk_summary.risk_score == pytest.approx(20.0)
        assert amm_repo.risk_summary.risk_level == RiskLevel.LOW

    def test_factors(self, amm_repo):
        calls = amm_repo.factors.call_classification
        assert calls.total_calls == 1
        assert calls.signed_calls == 1
        assert calls.program_targets == ["token_program"]
        visibility = amm_repo.factors.function_visibility
        assert visibility.total_functions == 5
        assert visibility.public_functions == 4
        assert visibility.function_factor == 0.0
        assert amm_repo.factors.lines_of_code.files_counted == 2
        assert amm_repo.factors.lines_of_code.lines_of_code == amm_repo.total_lines_of_code

    def test_root_path_is_absolute_posix(self, amm_repo):
        assert amm_repo.root_path == (FIXTURES / "amm_pool").resolve().as_posix()

    def test_broken_file_does_not_stop_the_run(self):
        repo = AnalyzerEngine(AnalyzerConfig(root_path=str(FIXTURES / "broken_program"))).analyze_repository()
        assert [f.path for f in repo.files] == ["src/ok.rs"]
        assert [(f.path, f.kind) for f in repo.failures] == [("src/lib.rs", FailureKind.PARSE)]

    def test_unreadable_file_recorded_as_io_failure(self, tmp_path: Path):
        (tmp_path / "ok.rs").write_text("fn ok() {}\n")
        (tmp_path / "latin1.rs").write_bytes(b"fn caf\xe9() {}\n")
        repo = AnalyzerEngine(AnalyzerConfig(root_path=str(tmp_path))).analyze_repository()
        assert [f.path for f in repo.files] == ["ok.rs"]
        assert repo.failures[0].path == "latin1.rs"
        assert repo.failures[0].kind == FailureKind.IO

    def test_worker_pool_matches_sequential(self):
        root = str(FIXTURES / "amm_pool")
        sequential = AnalyzerEngine(AnalyzerConfig(root_path=root)).analyze_repository()
        parallel = AnalyzerEngine(AnalyzerConfig(root_path=root, workers=2)).analyze_repository()
        assert to_canonical_json(parallel) == to_canonical_json(sequential)

    def test_missing_root(self, tmp_path: Path):
        engine = AnalyzerEngine(AnalyzerConfig(root_path=str(tmp_path / "missing")))
        with pytest.raises(ConfigurationFailure):
            engine.analyze_repository()

    def test_bad_custom_registry(self, tmp_path: Path):
        config = AnalyzerConfig(analysis=AnalysisConfig(pattern_registry=str(tmp_path / "none.yaml")))
        with pytest.raises(ConfigurationFailure):
            AnalyzerEngine(config)


class TestAnalyzeSingleFile:
    """Single-file mode raises instead of recording failures."""

    def test_analyzes_file(self):
        record = AnalyzerEngine().analyze_single_file(FIXTURES / "amm_pool/programs/amm_pool/src/math.rs")
        assert [f.name for f in record.functions] == ["calc_amount_out", "check_invariant", "normalize_decimals"]
        normalize = record.functions[2]
        assert normalize.control_flow.cyclomatic_complexity == 5
        assert normalize.math_functions.pow == 1
        assert normalize.arithmetic.saturating_mul == 1

    def test_directory_rejected(self, tmp_path: Path):
        with pytest.raises(SingleFileModeFailure):
            AnalyzerEngine().analyze_single_file(tmp_path)

    def test_missing_file_rejected(self, tmp_path: Path):
        with pytest.raises(SingleFileModeFailure):
            AnalyzerEngine().analyze_single_file(tmp_path / "nope.rs")

    def test_parse_failure_raised(self):
        with pytest.raises(ParseFailure):
            AnalyzerEngine().analyze_single_file(FIXTURES / "broken_program/src/lib.rs")
