# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Read-only type query protocol consumed by the lints.

Lints never look at checker internals: everything they need from typing
(expression types, coercions, method resolution, source text) goes through
this protocol. A query object is passed explicitly to each lint call and must
not be mutated while lints run, so one instance can serve many concurrent
analyses.

Method handles returned by `resolved_method` are opaque; callers only hand
them back to the other `method_*`/`*_method` queries.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, Tuple

from etalint.core.types_core import TypeDesc


class TypeQuery(Protocol):
	"""Questions a lint may ask about a type-checked HIR tree."""

	def type_of(self, expr: Any) -> TypeDesc:
		"""Return the type of `expr` as seen before any adjustment."""
		...

	def is_type_adjusted(self, expr: Any) -> bool:
		"""
		Return True if an implicit coercion (deref, unsize, reborrow) is applied
		to `expr`'s value where it is used.
		"""
		...

	def is_unsafe_function_type(self, ty: TypeDesc) -> bool:
		"""Return True if `ty` is a function type that requires `unsafe` to call."""
		...

	def resolved_method(self, call: Any) -> Optional[Any]:
		"""Return the method handle a method-call expression resolved to, if any."""
		...

	def resolved_method_signature(self, call: Any) -> Optional[Tuple[TypeDesc, bool]]:
		"""
		Return `(declared_self_type, is_unsafe)` for the method a method call
		resolved to, or None when the call did not resolve.
		"""
		...

	def method_type(self, method: Any) -> TypeDesc:
		"""Return the method's function type (receiver is the first parameter)."""
		...

	def trait_owning_method(self, method: Any) -> Optional[str]:
		"""Return the fully qualified path of the trait declaring `method`, if any."""
		...

	def is_inherent_method(self, method: Any) -> bool:
		"""Return True if `method` is defined in an inherent (non-trait) impl."""
		...

	def source_text(self, expr: Any) -> Optional[str]:
		"""Return the verbatim source text of `expr`, when available."""
		...


__all__ = ["TypeQuery"]
