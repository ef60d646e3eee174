# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from etalint.checker import Checker, CheckResult
from etalint.checker.method_registry import CallableKind
from etalint.core import types_core as T
from etalint.frontend import check_source
from etalint.hir import hir_nodes as H
from etalint.hir.hir_utils import walk_exprs
from etalint.parser import ast

PRELUDE = """
struct Vec -> [i32];
trait Trim { fn trim(&self) -> &str; }
impl Trim for str {}
impl [i32] { fn first(&self) -> i32; }
impl Vec { fn push(&mut self, x: i32); }
fn sum(xs: &[i32]) -> i32;
fn id(x: i32) -> i32;
fn map_str(f: fn(&str) -> &str);
fn apply(f: fn(i32) -> i32);
"""


def _check(body: str) -> CheckResult:
	result, diags = check_source(PRELUDE + body, file="t.rs")
	assert result is not None
	assert [d.message for d in diags] == []
	return result


def _exprs(result: CheckResult, kind: type) -> list:
	return [e for fn in result.functions for e in walk_exprs(fn) if isinstance(e, kind)]


def test_closure_param_takes_expected_function_type():
	result = _check("fn main() { map_str(|s| s.trim()); }")
	(closure,) = _exprs(result, H.HLambda)
	assert result.query.type_of(closure) == T.function((T.ref(T.STR),), T.ref(T.STR))
	(call,) = _exprs(result, H.HMethodCall)
	method = result.query.resolved_method(call)
	assert method.kind is CallableKind.METHOD_TRAIT
	assert result.query.trait_owning_method(method) == "Trim"
	assert not result.query.is_type_adjusted(call.receiver)


def test_closure_param_inferred_from_first_call_argument():
	result = _check("fn main() { let f = |x| id(x); }")
	(closure,) = _exprs(result, H.HLambda)
	assert result.query.type_of(closure) == T.function((T.int_type(),), T.int_type())


def test_deref_and_unsize_coercions_are_adjustments():
	result = _check(
		"""
fn main(v: &Vec, a: &[i32; 3], m: &mut [i32]) {
	sum(v);
	sum(a);
	sum(m);
	sum(&*m);
}
"""
	)
	args = [call.args[0] for call in _exprs(result, H.HCall)]
	assert [result.query.is_type_adjusted(a) for a in args] == [True, True, True, False]


def test_method_through_deref_marks_receiver_adjusted():
	result = _check("fn main(v: &Vec) { v.first(); }")
	(call,) = _exprs(result, H.HMethodCall)
	assert result.query.is_type_adjusted(call.receiver)
	self_ty, unsafe = result.query.resolved_method_signature(call)
	assert self_ty == T.ref(T.slice_of(T.int_type()))
	assert not unsafe
	assert result.query.is_inherent_method(result.query.resolved_method(call))


def test_source_text_recovers_callee_snippet():
	result = _check("fn main() { apply(|x| id(x)); }")
	inner = [c for c in _exprs(result, H.HCall) if isinstance(c.fn, H.HPath) and c.fn.name == "id"][0]
	assert result.query.source_text(inner.fn) == "id"


def test_associated_paths_resolve():
	result = _check("fn main(v: &Vec) { let f = Trim::trim; let g = Vec::push; }")
	paths = [p for p in _exprs(result, H.HPath) if not p.is_single()]
	assert [str(result.query.type_of(p)) for p in paths] == ["fn(&Self) -> &str", "fn(&mut Vec, i32)"]


def test_type_errors_are_reported():
	result, diags = check_source(
		PRELUDE
		+ """
fn main(v: &Vec) {
	id("x");
	id(1, 2);
	nope(1);
	v.missing();
	let c = |y| y.trim();
}
""",
		file="t.rs",
	)
	messages = [d.message for d in diags]
	assert any("mismatched types" in m for m in messages)
	assert any("takes 1 argument but 2 were supplied" in m for m in messages)
	assert any("cannot find value `nope`" in m for m in messages)
	assert any("no method named 'missing'" in m for m in messages)
	assert any("type annotations needed for `y`" in m for m in messages)
	assert all(d.phase == "typecheck" and d.span.file == "t.rs" for d in diags)


def test_unknown_types_and_traits_are_reported():
	_result, diags = check_source("fn f(x: Missing); impl Nope for i32 {}")
	messages = [d.message for d in diags]
	assert "cannot find type `Missing` in this scope" in messages
	assert "cannot find trait `Nope` in this scope" in messages


def test_duplicate_definitions_are_reported():
	_result, diags = check_source("fn f(); fn f(); struct S; struct S;")
	messages = [d.message for d in diags]
	assert "duplicate function 'f'" in messages
	assert "the name `S` is defined multiple times" in messages


def test_receiver_outside_impl_is_an_internal_error():
	loc = ast.Located(line=1, column=1)
	fn = ast.FunctionDef(
		path=["free"],
		params=[],
		ret=None,
		body=None,
		loc=loc,
		self_param=ast.SelfParam(mode="ref", loc=loc),
	)
	with pytest.raises(TypeError, match="outside a trait or impl"):
		Checker(ast.Program(functions=[fn])).check()


def test_unknown_receiver_mode_is_an_internal_error():
	loc = ast.Located(line=1, column=1)
	method = ast.FunctionDef(
		path=["m"],
		params=[],
		ret=None,
		body=None,
		loc=loc,
		self_param=ast.SelfParam(mode="typed", loc=loc),
	)
	trait = ast.TraitDef(path=["Tr"], methods=[method], loc=loc)
	with pytest.raises(ValueError, match="unsupported `self` receiver"):
		Checker(ast.Program(traits=[trait])).check()


def test_trait_impl_method_bodies_are_checked():
	result = _check(
		"""
trait Show { fn show(&self) -> &str; }
struct Name;
fn label(n: &Name) -> &str;
impl Show for Name { fn show(&self) -> &str { label(self); } }
"""
	)
	(call,) = _exprs(result, H.HCall)
	assert result.query.type_of(call.args[0]) == T.ref(T.nominal("Name"))
