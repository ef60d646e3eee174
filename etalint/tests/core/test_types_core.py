# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from etalint.core import types_core as T
from etalint.core.types_core import TypeKind


def test_primitive_lookup():
	assert T.primitive("i64").kind is TypeKind.INT
	assert T.primitive("usize").kind is TypeKind.UINT
	assert T.primitive("f32").kind is TypeKind.FLOAT
	assert T.primitive("str") is T.STR
	assert T.primitive("Vec") is None


def test_types_are_structural_values():
	assert T.ref(T.int_type()) == T.ref(T.int_type())
	assert T.ref(T.int_type()) != T.ref(T.int_type(), mutable=True)
	assert T.nominal("a::B") == T.nominal("a::B")


def test_function_accessors():
	fn = T.function((T.BOOL, T.STR), T.CHAR, unsafe=True)
	assert fn.fn_params == (T.BOOL, T.STR)
	assert fn.fn_ret == T.CHAR
	assert fn.unsafe
	with pytest.raises(TypeError):
		T.BOOL.fn_params


def test_strip_refs_and_inner():
	ty = T.ref(T.ref(T.slice_of(T.uint_type("u8")), mutable=True))
	assert ty.strip_refs() == T.slice_of(T.uint_type("u8"))
	assert ty.inner.is_ref()
	with pytest.raises(TypeError):
		T.STR.inner


def test_display():
	assert str(T.ref(T.STR, mutable=True)) == "&mut str"
	assert str(T.array(T.int_type(), 3)) == "[i32; 3]"
	assert str(T.nominal("Vec", (T.int_type(),))) == "Vec<i32>"
	assert str(T.function((T.int_type(),), T.UNIT)) == "fn(i32)"
	assert str(T.function((), T.BOOL, unsafe=True)) == "unsafe fn() -> bool"
	assert str(T.tuple_of((T.int_type(),))) == "(i32,)"
	assert str(T.UNIT) == "()"
