# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Engine-level tests: hand-built HIR plus a stub TypeQuery.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from etalint.core import types_core as T
from etalint.core.span import Span
from etalint.core.types_core import TypeDesc
from etalint.hir import hir_nodes as H
from etalint.lints import EtaPass, Level, LintConfig
from etalint.lints.eta_reduction import (
	check_closure,
	check_closure_call,
	check_closure_method_call,
	compare_inputs,
	qualified_name,
)
from etalint.lints.findings import Finding, FindingKind


@dataclass(frozen=True)
class _Method:
	fn_type: TypeDesc
	trait_path: Optional[str] = None
	inherent: bool = False


class _StubQuery:
	"""TypeQuery over dicts keyed by expression identity."""

	def __init__(self) -> None:
		self.types: dict[int, TypeDesc] = {}
		self.adjusted: set[int] = set()
		self.methods: dict[int, _Method] = {}
		self.sources: dict[int, str] = {}

	def type_of(self, expr):
		return self.types.get(id(expr), T.UNKNOWN)

	def is_type_adjusted(self, expr):
		return id(expr) in self.adjusted

	def is_unsafe_function_type(self, ty):
		return ty.kind is T.TypeKind.FUNCTION and ty.unsafe

	def resolved_method(self, call):
		return self.methods.get(id(call))

	def resolved_method_signature(self, call):
		m = self.methods.get(id(call))
		if m is None:
			return None
		return m.fn_type.fn_params[0], m.fn_type.unsafe

	def method_type(self, method):
		return method.fn_type

	def trait_owning_method(self, method):
		return method.trait_path

	def is_inherent_method(self, method):
		return method.inherent

	def source_text(self, expr):
		return self.sources.get(id(expr))


def _params(*names: str) -> list[H.HParam]:
	return [H.HParam(pat=H.HBindingPat(name=n)) for n in names]


def _var(name: str) -> H.HPath:
	return H.HPath(segments=[name])


def _call_closure(query: _StubQuery, params: list[str], args: list[str], *, callee_ty: TypeDesc | None = None):
	callee = _var("foo")
	query.types[id(callee)] = callee_ty or T.function(tuple(T.int_type() for _ in args), T.int_type())
	query.sources[id(callee)] = "foo"
	call = H.HCall(fn=callee, args=[_var(a) for a in args])
	return H.HLambda(params=_params(*params), body_expr=call), call


def test_compare_inputs_requires_same_names_in_order():
	assert compare_inputs(_params("a", "b"), [_var("a"), _var("b")])
	assert not compare_inputs(_params("a", "b"), [_var("b"), _var("a")])


def test_compare_inputs_rejects_patterns_and_non_paths():
	tuple_param = [H.HParam(pat=H.HTuplePat(elements=[H.HBindingPat("a")]))]
	assert not compare_inputs(tuple_param, [_var("a")])
	assert not compare_inputs([H.HParam(pat=H.HWildcardPat())], [_var("_")])
	assert not compare_inputs(_params("a"), [H.HPath(segments=["m", "a"])])
	assert not compare_inputs(_params("a"), [H.HBorrow(subject=_var("a"))])
	assert not compare_inputs(_params("a"), [H.HLiteralInt(1)])


def test_compare_inputs_is_nominal_only():
	# Types are never consulted; `mut` bindings still forward by name.
	assert compare_inputs([H.HParam(pat=H.HBindingPat("x", is_mut=True))], [_var("x")])


def test_forwarding_call_yields_callee_text():
	q = _StubQuery()
	closure, _call = _call_closure(q, ["a", "b"], ["a", "b"])
	assert check_closure(q, closure) == Finding(kind=FindingKind.REDUNDANT, replacement_text="foo")


def test_swapped_arguments_yield_nothing():
	q = _StubQuery()
	closure, _call = _call_closure(q, ["a", "b"], ["b", "a"])
	assert check_closure(q, closure) is None


def test_arity_mismatch_yields_nothing():
	q = _StubQuery()
	closure, call = _call_closure(q, ["a"], ["a", "extra"])
	assert check_closure(q, closure) is None
	assert check_closure_call(q, closure.params, call) is None


def test_unsafe_callee_yields_nothing():
	q = _StubQuery()
	closure, _call = _call_closure(q, ["a"], ["a"], callee_ty=T.function((T.int_type(),), unsafe=True))
	assert check_closure(q, closure) is None


def test_adjusted_argument_or_result_yields_nothing():
	q = _StubQuery()
	closure, call = _call_closure(q, ["a"], ["a"])
	q.adjusted.add(id(call.args[0]))
	assert check_closure(q, closure) is None

	q2 = _StubQuery()
	closure2, call2 = _call_closure(q2, ["a"], ["a"])
	q2.adjusted.add(id(call2))
	assert check_closure(q2, closure2) is None


def test_missing_source_text_still_reports_without_replacement():
	q = _StubQuery()
	closure, call = _call_closure(q, ["a"], ["a"])
	del q.sources[id(call.fn)]
	assert check_closure(q, closure) == Finding(kind=FindingKind.REDUNDANT, replacement_text=None)


def test_non_call_bodies_and_non_closures_are_ignored():
	q = _StubQuery()
	assert check_closure(q, H.HLambda(params=_params("a"), body_expr=_var("a"))) is None
	assert check_closure(q, _var("foo")) is None


def _method_closure(q: _StubQuery, method: _Method, recv_ty: TypeDesc, *, params=("s",), args=()):
	recv = _var("s")
	q.types[id(recv)] = recv_ty
	call = H.HMethodCall(receiver=recv, method_name="trim", args=[_var(a) for a in args])
	q.methods[id(call)] = method
	return H.HLambda(params=_params(*params), body_expr=call), call


def test_trait_method_with_matching_borrow_depth_uses_trait_path():
	q = _StubQuery()
	method = _Method(fn_type=T.function((T.ref(T.type_param("Self")),), T.ref(T.STR)), trait_path="Trait")
	closure, _call = _method_closure(q, method, T.ref(T.STR))
	assert check_closure(q, closure) == Finding(kind=FindingKind.REDUNDANT, replacement_text="Trait::trim")


def test_trait_method_with_different_borrow_depth_yields_nothing():
	q = _StubQuery()
	method = _Method(fn_type=T.function((T.ref(T.type_param("Self")),)), trait_path="Trait")
	closure, _call = _method_closure(q, method, T.ref(T.ref(T.STR)))
	assert check_closure(q, closure) is None


def test_inherent_method_reached_through_deref_yields_nothing():
	q = _StubQuery()
	method = _Method(fn_type=T.function((T.ref(T.slice_of(T.int_type())),), T.uint_type()), inherent=True)
	closure, call = _method_closure(q, method, T.ref(T.nominal("Vec")))
	# The receiver's auto-deref does not disqualify; the name synthesis does.
	q.adjusted.add(id(call.receiver))
	assert check_closure(q, closure) is None


def test_inherent_method_on_same_type_uses_type_name():
	q = _StubQuery()
	method = _Method(fn_type=T.function((T.ref(T.nominal("app::Buf")),)), inherent=True)
	closure, _call = _method_closure(q, method, T.ref(T.nominal("app::Buf")))
	assert check_closure(q, closure) == Finding(kind=FindingKind.REDUNDANT, replacement_text="app::Buf::trim")


def test_receiver_adjustment_is_not_scanned_but_argument_adjustment_is():
	q = _StubQuery()
	method = _Method(fn_type=T.function((T.ref(T.type_param("Self")), T.int_type())), trait_path="Trait")
	closure, call = _method_closure(q, method, T.ref(T.STR), params=("s", "n"), args=("n",))
	q.adjusted.add(id(call.receiver))
	assert check_closure_method_call(q, closure.params, call) is not None
	q.adjusted.add(id(call.args[0]))
	assert check_closure_method_call(q, closure.params, call) is None


def test_method_closure_first_param_must_name_receiver():
	q = _StubQuery()
	method = _Method(fn_type=T.function((T.ref(T.type_param("Self")), T.int_type())), trait_path="Trait")
	closure, _call = _method_closure(q, method, T.ref(T.STR), params=("n", "s"), args=("n",))
	assert check_closure(q, closure) is None


def test_unsafe_or_unresolved_method_yields_nothing():
	q = _StubQuery()
	method = _Method(fn_type=T.function((T.ref(T.type_param("Self")),), unsafe=True), trait_path="Trait")
	closure, call = _method_closure(q, method, T.ref(T.STR))
	assert check_closure(q, closure) is None
	del q.methods[id(call)]
	assert check_closure(q, closure) is None


def test_qualified_name_prefers_trait_then_inherent():
	expected = T.ref(T.nominal("Buf"))
	assert qualified_name(expected=expected, actual=expected, trait_path="Tr", is_inherent=True) == "Tr"
	assert qualified_name(expected=expected, actual=expected, trait_path=None, is_inherent=True) == "Buf"
	assert qualified_name(expected=expected, actual=expected, trait_path=None, is_inherent=False) is None
	assert qualified_name(expected=expected, actual=T.nominal("Buf"), trait_path="Tr", is_inherent=False) is None


def test_detector_is_idempotent():
	q = _StubQuery()
	closure, _call = _call_closure(q, ["a"], ["a"])
	assert check_closure(q, closure) == check_closure(q, closure)


def test_pass_checks_each_argument_independently():
	q = _StubQuery()
	good, _ = _call_closure(q, ["a"], ["a"])
	bad, _ = _call_closure(q, ["a", "b"], ["b", "a"])
	good.span = Span(line=3, column=9)
	outer = H.HCall(fn=_var("apply"), args=[bad, good, _var("x")])
	diags = EtaPass().check_expr(q, outer)
	assert len(diags) == 1
	d = diags[0]
	assert d.message == "redundant closure found"
	assert d.code == "redundant_closure"
	assert d.severity == "warning"
	assert d.span.line == 3
	assert [s.replacement for s in d.suggestions] == ["foo"]
	assert d.suggestions[0].message == "remove closure as shown"


def test_pass_covers_method_call_receiver_and_args():
	q = _StubQuery()
	good, _ = _call_closure(q, ["a"], ["a"])
	outer = H.HMethodCall(receiver=good, method_name="m", args=[])
	assert len(EtaPass().check_expr(q, outer)) == 1


def test_pass_skips_external_macro_spans():
	q = _StubQuery()
	good, _ = _call_closure(q, ["a"], ["a"])
	outer = H.HCall(fn=_var("apply"), args=[good], span=Span(line=1).in_external_macro())
	assert EtaPass().check_expr(q, outer) == []


def test_pass_respects_lint_levels():
	q = _StubQuery()
	good, _ = _call_closure(q, ["a"], ["a"])
	outer = H.HCall(fn=_var("apply"), args=[good])
	allow = LintConfig().apply([("redundant_closure", Level.ALLOW)])
	assert EtaPass(allow).check_expr(q, outer) == []
	deny = LintConfig().apply([("redundant-closure", Level.DENY)])
	assert [d.severity for d in EtaPass(deny).check_expr(q, outer)] == ["error"]
