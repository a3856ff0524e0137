"""Tests for the function count and visibility factor."""

from bulwark.models.factors import visibility_factor
from bulwark.scanner.factors.function_visibility import analyze_function_visibility
from bulwark.scanner.syntax import parse_rust

SAMPLE = """
pub fn a() {}
pub(crate) fn b() {}
fn c() {}

mod m {
    pub fn d() {}
    fn e() {}
}

struct S;

impl S {
    pub fn f(&self) {}
    fn g(&self) {}
}

trait T {
    fn h(&self) {}
    fn sig(&self);
}
"""


class TestVisibilityCounts:
    """Free, associated, public and private function counts."""

    def test_sample_counts(self):
        profile = analyze_function_visibility(parse_rust(SAMPLE))
        assert profile.total_functions == 8
        assert profile.free_functions == 5
        assert profile.associated_functions == 3
        assert profile.public_functions == 4
        assert profile.private_functions == 4
        assert profile.function_factor == 1.02

    def test_restricted_visibility_is_private(self):
        source = "pub(super) fn a() {}\npub(in crate::m) fn b() {}\npub ( crate ) fn c() {}"
        profile = analyze_function_visibility(parse_rust(source))
        assert profile.total_functions == 3
        assert profile.public_functions == 1

    def test_functions_inside_bodies_not_counted(self):
        profile = analyze_function_visibility(parse_rust("fn outer() { fn inner() {} }"))
        assert profile.total_functions == 1

    def test_empty_file(self):
        profile = analyze_function_visibility(parse_rust(""))
        assert profile.total_functions == 0
        assert profile.function_factor == 0.0


class TestVisibilityFactor:
    def test_floor_and_ceiling(self):
        assert visibility_factor(0) == 0.0
        assert visibility_factor(5) == 0.0
        assert visibility_factor(300) == 100.0
        assert visibility_factor(1000) == 100.0

    def test_linear_between(self):
        assert visibility_factor(6) == 0.34
        assert visibility_factor(79) == 25.08
        assert visibility_factor(152) == 49.83
