# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Callable registry: free functions, inherent methods and trait methods.

The registry stores declarations with enough metadata for method resolution
and for the lints' questions ("which trait owns this method?", "is it
inherent?"). It does not resolve anything itself; see `method_resolver`.

Methods declared in a trait are registered once, as the trait item. A trait
impl only records that the trait is implemented for a type: method calls
through a trait resolve to the trait item, whose receiver is typed in terms of
`Self`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, List, Optional, Tuple

from etalint.core.types_core import TypeDesc, TypeKind

CallableId = int


class SelfMode(Enum):
	SELF_BY_VALUE = auto()
	SELF_BY_REF = auto()
	SELF_BY_REF_MUT = auto()
	SELF_TYPED = auto()  # explicit `self: T`


class CallableKind(Enum):
	FREE_FUNCTION = auto()
	METHOD_INHERENT = auto()
	METHOD_TRAIT = auto()


@dataclass(frozen=True)
class CallableDecl:
	"""Registry entry for a free function or method."""

	callable_id: CallableId
	name: str
	path: str  # `foo`, `mod::foo`, `Type::method` or `Trait::method`
	kind: CallableKind
	fn_type: TypeDesc  # receiver (if any) is the first parameter

	self_mode: Optional[SelfMode] = None
	impl_target: Optional[TypeDesc] = None  # T in `impl T { ... }`
	trait_path: Optional[str] = None

	@property
	def is_method(self) -> bool:
		return self.self_mode is not None

	@property
	def self_type(self) -> Optional[TypeDesc]:
		"""Declared receiver type, exactly as written in the signature."""
		if self.self_mode is None:
			return None
		return self.fn_type.fn_params[0]

	@property
	def is_unsafe(self) -> bool:
		return self.fn_type.unsafe


def impl_key(ty: TypeDesc) -> str:
	"""Bucket key for impl lookup: nominal identity, or the type's text."""
	if ty.kind is TypeKind.NOMINAL:
		return ty.name
	return str(ty)


class CallableRegistry:
	"""Store callable declarations and provide candidate retrieval."""

	def __init__(self) -> None:
		self._by_id: Dict[CallableId, CallableDecl] = {}
		self._free_by_path: Dict[str, CallableDecl] = {}
		self._inherent: Dict[Tuple[str, str], CallableDecl] = {}
		self._trait_methods: Dict[Tuple[str, str], CallableDecl] = {}
		self._traits: Dict[str, List[str]] = {}  # trait path -> method names
		self._trait_impls: Dict[str, List[str]] = {}  # impl key -> trait paths
		self._next_id: CallableId = 1

	def _add(self, decl_kwargs: dict) -> CallableDecl:
		decl = CallableDecl(callable_id=self._next_id, **decl_kwargs)
		self._next_id += 1
		self._by_id[decl.callable_id] = decl
		return decl

	def register_free_function(self, *, path: str, fn_type: TypeDesc) -> CallableDecl:
		if path in self._free_by_path:
			raise ValueError(f"duplicate function '{path}'")
		decl = self._add(
			dict(
				name=path.rsplit("::", 1)[-1],
				path=path,
				kind=CallableKind.FREE_FUNCTION,
				fn_type=fn_type,
			)
		)
		self._free_by_path[path] = decl
		return decl

	def register_inherent_method(
		self,
		*,
		target: TypeDesc,
		name: str,
		fn_type: TypeDesc,
		self_mode: Optional[SelfMode],
	) -> CallableDecl:
		key = (impl_key(target), name)
		if key in self._inherent:
			raise ValueError(f"duplicate definitions with name '{name}' for type '{target}'")
		decl = self._add(
			dict(
				name=name,
				path=f"{impl_key(target)}::{name}",
				kind=CallableKind.METHOD_INHERENT,
				fn_type=fn_type,
				self_mode=self_mode,
				impl_target=target,
			)
		)
		self._inherent[key] = decl
		return decl

	def register_trait(self, trait_path: str) -> None:
		if trait_path in self._traits:
			raise ValueError(f"duplicate trait '{trait_path}'")
		self._traits[trait_path] = []

	def register_trait_method(
		self,
		*,
		trait_path: str,
		name: str,
		fn_type: TypeDesc,
		self_mode: Optional[SelfMode],
	) -> CallableDecl:
		if trait_path not in self._traits:
			raise ValueError(f"unknown trait '{trait_path}'")
		key = (trait_path, name)
		if key in self._trait_methods:
			raise ValueError(f"duplicate method '{name}' in trait '{trait_path}'")
		decl = self._add(
			dict(
				name=name,
				path=f"{trait_path}::{name}",
				kind=CallableKind.METHOD_TRAIT,
				fn_type=fn_type,
				self_mode=self_mode,
				trait_path=trait_path,
			)
		)
		self._trait_methods[key] = decl
		self._traits[trait_path].append(name)
		return decl

	def register_trait_impl(self, *, trait_path: str, target: TypeDesc) -> None:
		if trait_path not in self._traits:
			raise ValueError(f"unknown trait '{trait_path}'")
		impls = self._trait_impls.setdefault(impl_key(target), [])
		if trait_path in impls:
			raise ValueError(f"conflicting implementations of trait '{trait_path}' for type '{target}'")
		impls.append(trait_path)

	def has_trait(self, trait_path: str) -> bool:
		return trait_path in self._traits

	def trait_paths(self) -> List[str]:
		return list(self._traits)

	def trait_method_names(self, trait_path: str) -> List[str]:
		return list(self._traits.get(trait_path, []))

	def get(self, callable_id: CallableId) -> CallableDecl:
		return self._by_id[callable_id]

	def get_free(self, path: str) -> Optional[CallableDecl]:
		return self._free_by_path.get(path)

	def get_inherent(self, target: TypeDesc, name: str) -> Optional[CallableDecl]:
		return self._inherent.get((impl_key(target), name))

	def get_trait_method(self, trait_path: str, name: str) -> Optional[CallableDecl]:
		return self._trait_methods.get((trait_path, name))

	def traits_implemented_by(self, target: TypeDesc) -> List[str]:
		return list(self._trait_impls.get(impl_key(target), []))


__all__ = [
	"CallableId",
	"CallableKind",
	"CallableDecl",
	"CallableRegistry",
	"SelfMode",
	"impl_key",
]
