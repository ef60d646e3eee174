# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Method-call resolution atop CallableRegistry.

Rules (a reduced form of the usual autoderef probe):
- Walk the receiver's deref chain: the receiver type itself, then each step
  obtained by peeling a reference or following a struct's declared deref
  target.
- At each non-reference step, an inherent method of that type wins; otherwise
  a method of a trait implemented for that type is used. Two traits providing
  the same name at the same step is ambiguous.
- The receiver may be auto-referenced or auto-dereferenced to reach the
  declared receiver type; when that happens the receiver is "adjusted".

Argument types are not used for selection; the checker validates them after
resolution.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Mapping, Optional

from etalint.core.types_core import TypeDesc, TypeKind, ref
from etalint.checker.method_registry import CallableDecl, CallableRegistry, SelfMode

# Deref chains longer than this are treated as cycles.
_MAX_DEREF_STEPS = 16


class ResolutionError(ValueError):
	"""Raised when no viable or ambiguous callables are found."""


@dataclass(frozen=True)
class MethodResolution:
	"""Resolved method plus the receiver type it was found on."""

	decl: CallableDecl
	step_type: TypeDesc  # deref step the method was found on (substitutes `Self`)
	receiver_adjusted: bool


def deref_steps(ty: TypeDesc, deref_targets: Mapping[str, TypeDesc]) -> List[TypeDesc]:
	"""
	Return the autoderef chain of `ty`, starting with `ty` itself.

	`deref_targets` maps nominal type paths to their declared deref target.
	"""
	steps = [ty]
	cur = ty
	while len(steps) <= _MAX_DEREF_STEPS:
		if cur.kind is TypeKind.REF:
			cur = cur.params[0]
		elif cur.kind is TypeKind.NOMINAL and cur.name in deref_targets:
			cur = deref_targets[cur.name]
		else:
			break
		if cur in steps:
			break
		steps.append(cur)
	return steps


def subst_self(ty: TypeDesc, self_ty: TypeDesc) -> TypeDesc:
	"""Replace the `Self` type parameter inside `ty` with `self_ty`."""
	if ty.kind is TypeKind.PARAM and ty.name == "Self":
		return self_ty
	if not ty.params:
		return ty
	return TypeDesc(
		kind=ty.kind,
		name=ty.name,
		params=tuple(subst_self(p, self_ty) for p in ty.params),
		ref_mut=ty.ref_mut,
		length=ty.length,
		unsafe=ty.unsafe,
	)


def expected_receiver_type(decl: CallableDecl, step_type: TypeDesc) -> TypeDesc:
	"""The receiver type the call needs once `Self` is known."""
	if decl.self_mode is SelfMode.SELF_BY_REF:
		return ref(step_type)
	if decl.self_mode is SelfMode.SELF_BY_REF_MUT:
		return ref(step_type, mutable=True)
	if decl.self_mode is SelfMode.SELF_BY_VALUE:
		return step_type
	assert decl.self_type is not None
	return subst_self(decl.self_type, step_type)


def resolve_method_call(
	registry: CallableRegistry,
	deref_targets: Mapping[str, TypeDesc],
	*,
	receiver_type: TypeDesc,
	method_name: str,
) -> MethodResolution:
	for step in deref_steps(receiver_type, deref_targets):
		if step.kind is TypeKind.REF:
			continue
		decl = registry.get_inherent(step, method_name)
		if decl is not None and decl.is_method:
			return _resolution(decl, step, receiver_type)
		candidates: list[CallableDecl] = []
		for trait_path in registry.traits_implemented_by(step):
			trait_decl = registry.get_trait_method(trait_path, method_name)
			if trait_decl is not None and trait_decl.is_method:
				candidates.append(trait_decl)
		if len(candidates) > 1:
			paths = ", ".join(sorted(c.trait_path or "?" for c in candidates))
			raise ResolutionError(f"multiple applicable items in scope for method '{method_name}': {paths}")
		if candidates:
			return _resolution(candidates[0], step, receiver_type)
	raise ResolutionError(f"no method named '{method_name}' found for type '{receiver_type}'")


def _resolution(decl: CallableDecl, step: TypeDesc, receiver_type: TypeDesc) -> MethodResolution:
	expected = expected_receiver_type(decl, step)
	return MethodResolution(decl=decl, step_type=step, receiver_adjusted=(expected != receiver_type))


def resolve_associated_path(
	registry: CallableRegistry,
	*,
	owner: Optional[TypeDesc],
	trait_path: Optional[str],
	name: str,
) -> CallableDecl:
	"""
	Resolve `Owner::name` used as a value.

	`owner` is set when the prefix names a type (inherent lookup first, then
	traits implemented for it); `trait_path` when it names a trait.
	"""
	if owner is not None:
		decl = registry.get_inherent(owner, name)
		if decl is not None:
			return decl
		for tp in registry.traits_implemented_by(owner):
			trait_decl = registry.get_trait_method(tp, name)
			if trait_decl is not None:
				return trait_decl
		raise ResolutionError(f"no function or associated item named '{name}' found for type '{owner}'")
	if trait_path is not None:
		trait_decl = registry.get_trait_method(trait_path, name)
		if trait_decl is not None:
			return trait_decl
		raise ResolutionError(f"cannot find method '{name}' in trait '{trait_path}'")
	raise ResolutionError(f"cannot resolve associated item '{name}'")


__all__ = [
	"MethodResolution",
	"ResolutionError",
	"deref_steps",
	"expected_receiver_type",
	"resolve_associated_path",
	"resolve_method_call",
	"subst_self",
]
