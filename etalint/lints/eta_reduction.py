# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Redundant closure detection (eta reduction).

A closure `|a, b| f(a, b)` that only forwards its parameters, in order, to a
single call can usually be replaced by `f` itself. The rewrite changes
behavior when the closure performs an implicit coercion, hides an unsafe
call, or when no path for the callee can be written; in those cases the
detectors abstain.

Detectors are pure: they read the HIR and a `TypeQuery` and return a
`Finding` or None. They never raise for unsupported shapes.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from etalint.core.diagnostics import Diagnostic
from etalint.core.types_core import TypeDesc
from etalint.core.types_protocol import TypeQuery
from etalint.hir import hir_nodes as H
from .findings import Finding, FindingKind, finding_to_diagnostic
from .lint_defs import LintConfig, REDUNDANT_CLOSURE
from .type_match import match_borrow_depth, match_types, type_display_name


def compare_inputs(params: Sequence[H.HParam], args: Sequence[H.HExpr]) -> bool:
	"""
	True iff each parameter is a simple binding forwarded, by name, as the
	argument in the same position. Lengths must already be equal.
	"""
	for param, arg in zip(params, args):
		if not isinstance(param.pat, H.HBindingPat):
			return False
		if not isinstance(arg, H.HPath) or not arg.is_single():
			return False
		if arg.segments[0] != param.pat.name:
			return False
	return True


def check_closure_call(query: TypeQuery, params: Sequence[H.HParam], call: H.HCall) -> Optional[Finding]:
	"""`|params| callee(args)` → `callee`."""
	if len(call.args) != len(params):
		return None
	if query.is_type_adjusted(call) or any(query.is_type_adjusted(arg) for arg in call.args):
		return None
	if query.is_unsafe_function_type(query.type_of(call.fn)):
		return None
	if not compare_inputs(params, call.args):
		return None
	return Finding(kind=FindingKind.REDUNDANT, replacement_text=query.source_text(call.fn))


def check_closure_method_call(
	query: TypeQuery,
	params: Sequence[H.HParam],
	call: H.HMethodCall,
) -> Optional[Finding]:
	"""`|recv, args| recv.method(args)` → `Owner::method`."""
	full_args = [call.receiver, *call.args]
	if len(full_args) != len(params):
		return None
	# The receiver is left out of the adjustment scan; auto-ref/deref of the
	# receiver is accounted for by `ufcs_type_name` instead.
	if query.is_type_adjusted(call) or any(query.is_type_adjusted(arg) for arg in call.args):
		return None
	method = query.resolved_method(call)
	if method is None:
		return None
	if query.is_unsafe_function_type(query.method_type(method)):
		return None
	if not compare_inputs(params, full_args):
		return None
	name = ufcs_type_name(query, call)
	if name is None:
		return None
	return Finding(kind=FindingKind.REDUNDANT, replacement_text=f"{name}::{call.method_name}")


def qualified_name(
	*,
	expected: TypeDesc,
	actual: TypeDesc,
	trait_path: Optional[str],
	is_inherent: bool,
) -> Optional[str]:
	"""
	Path prefix for a method reached with receiver type `actual` whose declared
	self type is `expected`.

	Trait methods only need the receiver to be borrowed as deeply as the
	declaration expects. Inherent methods need structurally equal types, since
	a receiver reached through deref would otherwise be qualified by an
	unrelated type.
	"""
	if trait_path is not None and match_borrow_depth(expected, actual):
		return trait_path
	if is_inherent and match_types(expected, actual):
		return type_display_name(actual)
	return None


def ufcs_type_name(query: TypeQuery, call: H.HMethodCall) -> Optional[str]:
	method = query.resolved_method(call)
	signature = query.resolved_method_signature(call)
	if method is None or signature is None:
		return None
	expected, _is_unsafe = signature
	return qualified_name(
		expected=expected,
		actual=query.type_of(call.receiver),
		trait_path=query.trait_owning_method(method),
		is_inherent=query.is_inherent_method(method),
	)


def check_closure(query: TypeQuery, expr: H.HExpr) -> Optional[Finding]:
	"""Analyze one candidate argument; None unless it is a redundant closure."""
	if not isinstance(expr, H.HLambda):
		return None
	body = expr.body_expr
	if isinstance(body, H.HCall):
		return check_closure_call(query, expr.params, body)
	if isinstance(body, H.HMethodCall):
		return check_closure_method_call(query, expr.params, body)
	return None


class EtaPass:
	"""Checks every closure argument of a call-like expression."""

	name = "EtaReduction"
	lints = (REDUNDANT_CLOSURE,)

	def __init__(self, config: LintConfig | None = None) -> None:
		self._config = config if config is not None else LintConfig()

	def check_expr(self, query: TypeQuery, expr: H.HExpr) -> List[Diagnostic]:
		if not self._config.is_enabled(REDUNDANT_CLOSURE):
			return []
		if expr.span.from_external_macro:
			return []
		if isinstance(expr, H.HCall):
			args: List[H.HExpr] = list(expr.args)
		elif isinstance(expr, H.HMethodCall):
			args = [expr.receiver, *expr.args]
		else:
			return []
		level = self._config.level(REDUNDANT_CLOSURE)
		diagnostics: list[Diagnostic] = []
		for arg in args:
			finding = check_closure(query, arg)
			if finding is not None:
				diagnostics.append(finding_to_diagnostic(finding, lint=REDUNDANT_CLOSURE, level=level, span=arg.span))
		return diagnostics


__all__ = [
	"EtaPass",
	"check_closure",
	"check_closure_call",
	"check_closure_method_call",
	"compare_inputs",
	"qualified_name",
	"ufcs_type_name",
]
