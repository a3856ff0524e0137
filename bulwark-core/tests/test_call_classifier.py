"""Tests for cross-program invocation classification."""

import pytest

from bulwark.scanner.factors.call_classifier import analyze_call_classification
from bulwark.scanner.syntax import parse_rust


def _profile(source: str):
    return analyze_call_classification(parse_rust(source))


class TestProgramCalls:
    """Token, system and associated-token program helpers."""

    def test_single_signed_token_transfer(self):
        profile = _profile(
            """
fn pay(cpi_ctx: CpiContext<Transfer>, amount: u64) -> Result<()> {
    token::transfer(cpi_ctx, amount)?;
    Ok(())
}
"""
        )
        assert profile.total_calls == 1
        assert profile.signed_calls == 1
        assert profile.unsigned_calls == 0
        assert profile.token_program_calls == 1
        assert profile.program_targets == ["token_program"]
        assert profile.distinct_targets == 1
        assert profile.complexity_score == pytest.approx(12.0)
        assert profile.factor == pytest.approx(40.0)

    def test_buckets_by_program(self):
        profile = _profile(
            """
fn setup(ctx: Context<Init>) -> Result<()> {
    system_program::create_account(ctx.accounts.create_ctx(), 1_000, 165, &ID)?;
    anchor_spl::associated_token::create_idempotent(ctx.accounts.ata_ctx())?;
    ctx.accounts.mint_to(100)?;
    Ok(())
}
"""
        )
        assert profile.system_program_calls == 1
        assert profile.associated_token_program_calls == 1
        assert profile.token_program_calls == 1
        assert profile.program_targets == ["associated_token_program", "system_program", "token_program"]

    def test_call_without_arguments_is_unsigned(self):
        profile = _profile("fn sync() { token::sync_native(); }")
        assert profile.total_calls == 1
        assert profile.signed_calls == 0
        assert profile.unsigned_calls == 1
        assert profile.complexity_score == pytest.approx(2.0)


class TestNativeInvoke:
    def test_invoke_family(self):
        profile = _profile(
            """
fn raw(ix: Instruction, accounts: Vec<AccountInfo>, seeds: &[&[u8]]) {
    invoke(&ix, &accounts).unwrap();
    solana_program::program::invoke_signed(&ix, &accounts, &[seeds]).unwrap();
    invoke_unchecked();
}
"""
        )
        assert profile.total_calls == 3
        assert profile.signed_calls == 2
        assert profile.other_program_calls == 3
        assert profile.program_targets == ["native_invoke"]


class TestNotClassified:
    """Calls that are not CPIs, and calls nested inside a CPI."""

    def test_nested_cpi_counted_once(self):
        profile = _profile("fn f(a: A) { token::burn(CpiContext::new(a, token::transfer(a)), 5); }")
        assert profile.total_calls == 1

    def test_unqualified_helper_is_not_a_cpi(self):
        profile = _profile("fn f(a: u64, b: u64) { transfer(a, b); helpers::transfer(a, b); }")
        assert profile.total_calls == 0
        assert profile.program_targets == []
        assert profile.factor == 0.0

    def test_unrelated_methods(self):
        profile = _profile("fn f(v: Vec<u64>) -> usize { v.iter().map(|x| x + 1).count() }")
        assert profile.total_calls == 0
