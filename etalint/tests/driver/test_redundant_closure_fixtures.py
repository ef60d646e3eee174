# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
End-to-end: fixture source → parser → checker → lints.
"""

from __future__ import annotations

from etalint.core.diagnostics import Applicability
from etalint.frontend import lint_source
from etalint.lints import Level, LintConfig

PRELUDE = """
struct Vec -> [i32];
struct Buf;
trait Trim { fn trim(&self) -> &str; }
impl Trim for str {}
impl [i32] { fn first(&self) -> i32; }
impl Buf { fn size(&self) -> usize; }
fn id(x: i32) -> i32;
fn add(a: i32, b: i32) -> i32;
fn sum(xs: &[i32]) -> i32;
fn as_vec(v: &Vec) -> &Vec;
unsafe fn danger(x: i32) -> i32;
fn apply(f: fn(i32) -> i32);
fn apply2(f: fn(i32, i32) -> i32);
fn map_str(f: fn(&str) -> &str);
fn each(f: fn(&Vec) -> i32);
fn each_buf(f: fn(&Buf) -> usize);
fn each_slice(f: fn(&Vec) -> &[i32]);
"""


def _lint(body: str, config: LintConfig | None = None):
	return lint_source(PRELUDE + "fn main() {\n" + body + "\n}\n", file="fixture.rs", config=config)


def _replacements(body: str) -> list:
	diags = _lint(body)
	assert all(d.phase == "lint" for d in diags), [d.message for d in diags]
	return [s.replacement for d in diags for s in d.suggestions]


def test_forwarding_closure_is_reported_with_callee():
	diags = _lint("apply(|x| id(x));")
	assert len(diags) == 1
	d = diags[0]
	assert d.message == "redundant closure found"
	assert d.severity == "warning"
	assert d.span.file == "fixture.rs"
	assert d.span.column == 7
	(s,) = d.suggestions
	assert s.replacement == "id"
	assert s.message == "remove closure as shown"
	assert s.applicability is Applicability.MACHINE_APPLICABLE


def test_two_parameter_forwarding():
	assert _replacements("apply2(|a, b| add(a, b));") == ["add"]
	assert _replacements("apply2(|a, b| add(b, a));") == []


def test_path_callee_text_is_kept_verbatim():
	assert _replacements("each_buf(|b| Buf::size(b));") == ["Buf::size"]


def test_trait_method_is_qualified_by_trait():
	assert _replacements("map_str(|s| s.trim());") == ["Trim::trim"]


def test_inherent_method_is_qualified_by_receiver_type():
	assert _replacements("each_buf(|b| b.size());") == ["Buf::size"]


def test_inherent_method_through_deref_is_not_reported():
	assert _replacements("each(|v| v.first());") == []


def test_coerced_argument_is_not_reported():
	assert _replacements("each(|v| sum(v));") == []


def test_coerced_result_is_not_reported():
	assert _replacements("each_slice(|v| as_vec(v));") == []


def test_unsafe_callee_is_not_reported():
	assert _replacements("apply(|x| danger(x));") == []


def test_non_forwarding_bodies_are_not_reported():
	assert _replacements("apply(|x| id(1));") == []
	assert _replacements("apply(|x| x);") == []
	assert _replacements("apply2(|a, _| add(a, a));") == []


def test_macro_expansions_are_skipped():
	assert _replacements("wrap!(apply(|x| id(x)));") == []


def test_closures_inside_closures_are_visited():
	assert _replacements("let g = |y| apply(|x| id(x));") == ["id"]


def test_results_are_sorted_by_position():
	diags = _lint("apply(|x| id(x));\neach_buf(|b| b.size());")
	assert [s.replacement for d in diags for s in d.suggestions] == ["id", "Buf::size"]
	assert diags[0].span.line < diags[1].span.line


def test_lint_levels():
	deny = LintConfig().apply([("redundant_closure", Level.DENY)])
	assert [d.severity for d in _lint("apply(|x| id(x));", deny)] == ["error"]
	allow = LintConfig().apply([("style", Level.ALLOW)])
	assert _lint("apply(|x| id(x));", allow) == []


def test_front_end_errors_stop_linting():
	diags = _lint("apply(|x| id(x));\nid(\"s\");")
	assert [d.phase for d in diags] == ["typecheck"]
	parse = lint_source("fn main( {", file="fixture.rs")
	assert [d.phase for d in parse] == ["parser"]
