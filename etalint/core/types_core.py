# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Minimal type core shared by the checker and the lints.

Types are immutable `TypeDesc` values (a closed tagged variant) rather than
handles into a table: lints only ever compare and print them, so structural
values keep that code free of lookups.

Kind coverage:
  - BOOL, CHAR, INT (signed), UINT, FLOAT, STR: primitives; `name` keeps the
    spelling (`i32`, `u8`, ...).
  - REF, ARRAY, SLICE: one inner type in `params`.
  - NOMINAL: declared struct; `name` is the full path and is the type's
    identity, `params` holds generic arguments.
  - FUNCTION: `params` is (*param_types, return_type).
  - TUPLE: element types (the unit type is the empty tuple).
  - PARAM: a type parameter such as `Self` in a trait.
  - UNKNOWN: error recovery.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Tuple


class TypeKind(Enum):
	"""Kinds of types understood by the type core."""

	BOOL = auto()
	CHAR = auto()
	INT = auto()
	UINT = auto()
	FLOAT = auto()
	STR = auto()
	REF = auto()
	ARRAY = auto()
	SLICE = auto()
	NOMINAL = auto()
	FUNCTION = auto()
	TUPLE = auto()
	PARAM = auto()
	UNKNOWN = auto()


SIGNED_INT_NAMES = frozenset({"i8", "i16", "i32", "i64", "i128", "isize"})
UNSIGNED_INT_NAMES = frozenset({"u8", "u16", "u32", "u64", "u128", "usize"})
FLOAT_NAMES = frozenset({"f32", "f64"})


@dataclass(frozen=True)
class TypeDesc:
	"""Immutable description of a type."""

	kind: TypeKind
	name: str = ""
	params: Tuple["TypeDesc", ...] = ()
	ref_mut: bool = False  # only meaningful for TypeKind.REF
	length: Optional[int] = None  # only meaningful for TypeKind.ARRAY
	unsafe: bool = False  # only meaningful for TypeKind.FUNCTION

	@property
	def inner(self) -> "TypeDesc":
		"""Pointee/element type of a REF, ARRAY or SLICE."""
		if self.kind not in (TypeKind.REF, TypeKind.ARRAY, TypeKind.SLICE) or not self.params:
			raise TypeError(f"inner called on non-container type {self}")
		return self.params[0]

	@property
	def fn_params(self) -> Tuple["TypeDesc", ...]:
		if self.kind is not TypeKind.FUNCTION:
			raise TypeError(f"fn_params called on non-function type {self}")
		return self.params[:-1]

	@property
	def fn_ret(self) -> "TypeDesc":
		if self.kind is not TypeKind.FUNCTION:
			raise TypeError(f"fn_ret called on non-function type {self}")
		return self.params[-1]

	def is_ref(self) -> bool:
		return self.kind is TypeKind.REF

	def strip_refs(self) -> "TypeDesc":
		"""Peel every reference layer."""
		ty = self
		while ty.kind is TypeKind.REF:
			ty = ty.params[0]
		return ty

	def __str__(self) -> str:
		k = self.kind
		if k is TypeKind.REF:
			return ("&mut " if self.ref_mut else "&") + str(self.params[0])
		if k is TypeKind.ARRAY:
			return f"[{self.params[0]}; {self.length if self.length is not None else '_'}]"
		if k is TypeKind.SLICE:
			return f"[{self.params[0]}]"
		if k is TypeKind.NOMINAL:
			if self.params:
				return f"{self.name}<{', '.join(str(p) for p in self.params)}>"
			return self.name
		if k is TypeKind.FUNCTION:
			head = "unsafe fn" if self.unsafe else "fn"
			ret = self.params[-1]
			text = f"{head}({', '.join(str(p) for p in self.params[:-1])})"
			if ret != UNIT:
				text += f" -> {ret}"
			return text
		if k is TypeKind.TUPLE:
			if len(self.params) == 1:
				return f"({self.params[0]},)"
			return f"({', '.join(str(p) for p in self.params)})"
		if k is TypeKind.UNKNOWN:
			return "{unknown}"
		return self.name


UNIT = TypeDesc(TypeKind.TUPLE)
UNKNOWN = TypeDesc(TypeKind.UNKNOWN)
BOOL = TypeDesc(TypeKind.BOOL, "bool")
CHAR = TypeDesc(TypeKind.CHAR, "char")
STR = TypeDesc(TypeKind.STR, "str")


def primitive(name: str) -> TypeDesc | None:
	"""Return the primitive type spelled `name`, or None if it is not one."""
	if name == "bool":
		return BOOL
	if name == "char":
		return CHAR
	if name == "str":
		return STR
	if name in SIGNED_INT_NAMES:
		return TypeDesc(TypeKind.INT, name)
	if name in UNSIGNED_INT_NAMES:
		return TypeDesc(TypeKind.UINT, name)
	if name in FLOAT_NAMES:
		return TypeDesc(TypeKind.FLOAT, name)
	return None


def int_type(name: str = "i32") -> TypeDesc:
	return TypeDesc(TypeKind.INT, name)


def uint_type(name: str = "usize") -> TypeDesc:
	return TypeDesc(TypeKind.UINT, name)


def ref(inner: TypeDesc, *, mutable: bool = False) -> TypeDesc:
	return TypeDesc(TypeKind.REF, "", (inner,), ref_mut=mutable)


def array(elem: TypeDesc, length: int | None = None) -> TypeDesc:
	return TypeDesc(TypeKind.ARRAY, "", (elem,), length=length)


def slice_of(elem: TypeDesc) -> TypeDesc:
	return TypeDesc(TypeKind.SLICE, "", (elem,))


def nominal(path: str, args: Tuple[TypeDesc, ...] = ()) -> TypeDesc:
	return TypeDesc(TypeKind.NOMINAL, path, tuple(args))


def function(params: Tuple[TypeDesc, ...], ret: TypeDesc = UNIT, *, unsafe: bool = False) -> TypeDesc:
	return TypeDesc(TypeKind.FUNCTION, "fn", (*params, ret), unsafe=unsafe)


def tuple_of(elems: Tuple[TypeDesc, ...]) -> TypeDesc:
	return TypeDesc(TypeKind.TUPLE, "", tuple(elems))


def type_param(name: str) -> TypeDesc:
	return TypeDesc(TypeKind.PARAM, name)


__all__ = [
	"TypeKind",
	"TypeDesc",
	"UNIT",
	"UNKNOWN",
	"BOOL",
	"CHAR",
	"STR",
	"primitive",
	"int_type",
	"uint_type",
	"ref",
	"array",
	"slice_of",
	"nominal",
	"function",
	"tuple_of",
	"type_param",
]
