# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Checker-owned TypeQuery backed by typed side tables.

This is the concrete `TypeQuery` the front-end hands to lints. It wraps the
checker's NodeId-keyed tables (expression types, adjustments, method
resolutions) plus the file text for source snippets. It is read-only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from etalint.checker.method_registry import CallableDecl, CallableKind
from etalint.checker.method_resolver import MethodResolution
from etalint.core.types_core import TypeDesc, TypeKind, UNKNOWN
from etalint.core.types_protocol import TypeQuery
from etalint.hir import hir_nodes as H


@dataclass
class TypedTables:
	"""Side tables produced by the checker, keyed by HIR NodeId."""

	expr_types: Dict[H.NodeId, TypeDesc] = field(default_factory=dict)
	adjusted: set[H.NodeId] = field(default_factory=set)
	method_resolutions: Dict[H.NodeId, MethodResolution] = field(default_factory=dict)
	# Callee paths that resolved to a declared function or method.
	path_resolutions: Dict[H.NodeId, CallableDecl] = field(default_factory=dict)


class CheckerTypeQuery(TypeQuery):
	"""
	TypeQuery implementation backed by the checker's TypedTables.

	Method handles are the registry's `CallableDecl` records.
	"""

	def __init__(self, tables: TypedTables, source: str | None = None) -> None:
		self._tables = tables
		self._source = source

	def type_of(self, expr: Any) -> TypeDesc:
		return self._tables.expr_types.get(getattr(expr, "node_id", 0), UNKNOWN)

	def is_type_adjusted(self, expr: Any) -> bool:
		return getattr(expr, "node_id", 0) in self._tables.adjusted

	def is_unsafe_function_type(self, ty: TypeDesc) -> bool:
		return ty.kind is TypeKind.FUNCTION and ty.unsafe

	def resolved_method(self, call: Any) -> Optional[CallableDecl]:
		res = self._tables.method_resolutions.get(getattr(call, "node_id", 0))
		if res is None:
			return None
		return res.decl

	def resolved_method_signature(self, call: Any) -> Optional[Tuple[TypeDesc, bool]]:
		decl = self.resolved_method(call)
		if decl is None or decl.self_type is None:
			return None
		return decl.self_type, decl.is_unsafe

	def method_type(self, method: Any) -> TypeDesc:
		if not isinstance(method, CallableDecl):
			raise TypeError(f"method_type called on non-method handle {method!r}")
		return method.fn_type

	def trait_owning_method(self, method: Any) -> Optional[str]:
		if isinstance(method, CallableDecl) and method.kind is CallableKind.METHOD_TRAIT:
			return method.trait_path
		return None

	def is_inherent_method(self, method: Any) -> bool:
		return isinstance(method, CallableDecl) and method.kind is CallableKind.METHOD_INHERENT

	def source_text(self, expr: Any) -> Optional[str]:
		span = getattr(expr, "span", None)
		if self._source is None or span is None or not span.has_offsets():
			return None
		return self._source[span.start_pos:span.end_pos]


__all__ = ["CheckerTypeQuery", "TypedTables"]
