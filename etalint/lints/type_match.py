# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Structural type matchers used when qualifying a method path.

Both matchers are recursive pure functions over `TypeDesc`. They answer
narrower questions than type equality:

- `match_borrow_depth`: do both types carry the same number of leading
  references?
- `match_types`: are the types the same shape (primitive kind, container
  kind, declared nominal identity) all the way down?
"""

from __future__ import annotations

from etalint.core.types_core import TypeDesc, TypeKind

# Primitive kinds that match same-to-same. Integer widths are not compared.
_PRIMITIVE_KINDS = frozenset({TypeKind.BOOL, TypeKind.CHAR, TypeKind.INT, TypeKind.UINT, TypeKind.STR})
_CONTAINER_KINDS = frozenset({TypeKind.REF, TypeKind.ARRAY, TypeKind.SLICE})


def match_borrow_depth(lhs: TypeDesc, rhs: TypeDesc) -> bool:
	"""True iff `lhs` and `rhs` run out of reference layers at the same depth."""
	if lhs.is_ref() and rhs.is_ref():
		return match_borrow_depth(lhs.inner, rhs.inner)
	return not lhs.is_ref() and not rhs.is_ref()


def match_types(lhs: TypeDesc, rhs: TypeDesc) -> bool:
	"""
	Structural equality for qualified-name synthesis.

	References, arrays and slices match when their inner types match (array
	lengths and reference mutability are ignored). Nominal types match on the
	declared path; generic arguments are ignored.
	"""
	if lhs.kind is not rhs.kind:
		return False
	if lhs.kind in _PRIMITIVE_KINDS:
		return True
	if lhs.kind in _CONTAINER_KINDS:
		return match_types(lhs.params[0], rhs.params[0])
	if lhs.kind is TypeKind.NOMINAL:
		return lhs.name == rhs.name
	return False


def type_display_name(ty: TypeDesc) -> str:
	"""Printable name used as a path prefix: the nominal path, looking through references."""
	base = ty.strip_refs()
	if base.kind is TypeKind.NOMINAL:
		return base.name
	return str(base)


__all__ = ["match_borrow_depth", "match_types", "type_display_name"]
