# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Resolve parser type expressions into `TypeDesc` values.

Name lookup for nominal types: an exact full-path match against declared
structs, then (single-segment names only) a unique match on the last path
segment, so `Vec` finds `std::vec::Vec`. `Self` resolves to the enclosing
impl's target type, or to the `Self` type parameter inside a trait.
"""

from __future__ import annotations

from typing import Callable, Iterable, Optional

from etalint.core.diagnostics import Diagnostic
from etalint.core.span import Span
from etalint.core import types_core as T
from etalint.core.types_core import TypeDesc
from etalint.parser import ast


class TypeResolver:
	"""Resolves type expressions against a fixed set of declared struct paths."""

	def __init__(self, struct_paths: Iterable[str], *, file: str | None = None) -> None:
		self._paths: set[str] = set(struct_paths)
		self._by_last: dict[str, list[str]] = {}
		for path in sorted(self._paths):
			self._by_last.setdefault(path.rsplit("::", 1)[-1], []).append(path)
		self._file = file

	def lookup_struct(self, segments: list[str]) -> Optional[str]:
		"""Return the declared path named by `segments`, or None."""
		full = "::".join(segments)
		if full in self._paths:
			return full
		if len(segments) == 1:
			matches = self._by_last.get(segments[0], [])
			if len(matches) == 1:
				return matches[0]
		return None

	def resolve(
		self,
		texpr: ast.TypeExpr,
		*,
		self_type: Optional[TypeDesc],
		diag: Callable[[Diagnostic], None],
	) -> TypeDesc:
		"""
		Resolve `texpr`; unknown names report a typecheck diagnostic through
		`diag` and resolve to UNKNOWN.
		"""
		if isinstance(texpr, ast.RefType):
			return T.ref(self.resolve(texpr.inner, self_type=self_type, diag=diag), mutable=texpr.mutable)
		if isinstance(texpr, ast.ArrayType):
			return T.array(self.resolve(texpr.elem, self_type=self_type, diag=diag), texpr.length)
		if isinstance(texpr, ast.SliceType):
			return T.slice_of(self.resolve(texpr.elem, self_type=self_type, diag=diag))
		if isinstance(texpr, ast.TupleType):
			return T.tuple_of(tuple(self.resolve(e, self_type=self_type, diag=diag) for e in texpr.elements))
		if isinstance(texpr, ast.FnPtrType):
			params = tuple(self.resolve(p, self_type=self_type, diag=diag) for p in texpr.params)
			ret = self.resolve(texpr.ret, self_type=self_type, diag=diag) if texpr.ret is not None else T.UNIT
			return T.function(params, ret, unsafe=texpr.unsafe)
		if isinstance(texpr, ast.NamedType):
			return self._resolve_named(texpr, self_type=self_type, diag=diag)
		raise TypeError(f"unsupported type expression {texpr!r}")

	def _resolve_named(
		self,
		texpr: ast.NamedType,
		*,
		self_type: Optional[TypeDesc],
		diag: Callable[[Diagnostic], None],
	) -> TypeDesc:
		segments = texpr.path
		if len(segments) == 1 and not texpr.args:
			if segments[0] == "Self":
				if self_type is None:
					diag(self._error("`Self` is only available in traits and impls", texpr.loc))
					return T.UNKNOWN
				return self_type
			prim = T.primitive(segments[0])
			if prim is not None:
				return prim
		path = self.lookup_struct(segments)
		if path is None:
			diag(self._error(f"cannot find type `{'::'.join(segments)}` in this scope", texpr.loc))
			return T.UNKNOWN
		args = tuple(self.resolve(a, self_type=self_type, diag=diag) for a in texpr.args)
		return T.nominal(path, args)

	def _error(self, message: str, loc: object) -> Diagnostic:
		return Diagnostic(
			message=message,
			phase="typecheck",
			severity="error",
			span=Span.from_loc(loc).with_file(self._file),
		)


__all__ = ["TypeResolver"]
