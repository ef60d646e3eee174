# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Fixture checker: declarations → registry, bodies → HIR → typed side tables.

The checker plays the host compiler's role for the lints. It:
  - registers structs (with deref targets), traits, impls and functions
  - lowers every function body to HIR
  - types each expression, recording coercions ("adjustments") and method
    resolutions in NodeId-keyed tables
  - reports typecheck-phase diagnostics for anything it cannot type

Closure parameters without annotations take their type from the closure's
expected function type, or else from their first use in a position with an
expected type (a call argument or an annotated `let`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from etalint.core.diagnostics import Diagnostic
from etalint.core.span import Span
from etalint.core import types_core as T
from etalint.core.types_core import TypeDesc, TypeKind
from etalint.hir import AstToHIR
from etalint.hir import hir_nodes as H
from etalint.parser import ast
from .method_registry import CallableDecl, CallableRegistry, SelfMode
from .method_resolver import (
	ResolutionError,
	deref_steps,
	resolve_associated_path,
	resolve_method_call,
	subst_self,
)
from .type_env_impl import CheckerTypeQuery, TypedTables
from .type_resolver import TypeResolver


@dataclass
class CheckResult:
	"""Everything the lint driver needs from one checked file."""

	functions: List[H.HFunction]
	query: CheckerTypeQuery
	tables: TypedTables
	registry: CallableRegistry
	diagnostics: List[Diagnostic] = field(default_factory=list)


class _Local:
	"""A binding in scope; `ty` is None until inferred."""

	__slots__ = ("name", "ty")

	def __init__(self, name: str, ty: Optional[TypeDesc]) -> None:
		self.name = name
		self.ty = ty


_SELF_PARAM = T.type_param("Self")


class Checker:
	"""Type checker for one parsed fixture program."""

	def __init__(self, program: ast.Program, *, file: str | None = None) -> None:
		self._program = program
		self._file = file
		self._diagnostics: list[Diagnostic] = []
		self._registry = CallableRegistry()
		self._deref_targets: Dict[str, TypeDesc] = {}
		self._resolver = TypeResolver(("::".join(s.path) for s in program.structs), file=file)
		self._tables = TypedTables()
		self._scopes: list[dict[str, _Local]] = []
		self._self_type: Optional[TypeDesc] = None

	def check(self) -> CheckResult:
		bodies: list[Tuple[ast.FunctionDef, TypeDesc, Optional[TypeDesc]]] = []
		self._collect_structs()
		self._collect_traits(bodies)
		self._collect_impls(bodies)
		self._collect_functions(bodies)
		lowerer = AstToHIR(file=self._file)
		functions: list[H.HFunction] = []
		for fn, fn_type, self_type in bodies:
			hfn = lowerer.lower_function(fn)
			self._check_function(hfn, fn_type, self_type)
			functions.append(hfn)
		return CheckResult(
			functions=functions,
			query=CheckerTypeQuery(self._tables, self._program.source or None),
			tables=self._tables,
			registry=self._registry,
			diagnostics=list(self._diagnostics),
		)

	# --- declarations ---

	def _collect_structs(self) -> None:
		seen: set[str] = set()
		for s in self._program.structs:
			path = "::".join(s.path)
			if path in seen:
				self._error(f"the name `{path}` is defined multiple times", s.loc)
			seen.add(path)
		for s in self._program.structs:
			if s.deref_target is not None:
				self._deref_targets["::".join(s.path)] = self._resolve_type(s.deref_target, None)

	def _collect_traits(self, bodies: list) -> None:
		for trait in self._program.traits:
			trait_path = "::".join(trait.path)
			try:
				self._registry.register_trait(trait_path)
			except ValueError as err:
				self._error(str(err), trait.loc)
				continue
			for method in trait.methods:
				fn_type, mode = self._fn_type(method, self_type=_SELF_PARAM)
				try:
					self._registry.register_trait_method(
						trait_path=trait_path,
						name=method.name,
						fn_type=fn_type,
						self_mode=mode,
					)
				except ValueError as err:
					self._error(str(err), method.loc)
					continue
				if method.body is not None:
					bodies.append((method, fn_type, _SELF_PARAM))

	def _collect_impls(self, bodies: list) -> None:
		for impl in self._program.impls:
			target = self._resolve_type(impl.target, None)
			if target.kind is TypeKind.UNKNOWN:
				continue
			if impl.trait_path is not None:
				self._collect_trait_impl(impl, impl.trait_path, target, bodies)
				continue
			for method in impl.methods:
				fn_type, mode = self._fn_type(method, self_type=target)
				try:
					self._registry.register_inherent_method(
						target=target,
						name=method.name,
						fn_type=fn_type,
						self_mode=mode,
					)
				except ValueError as err:
					self._error(str(err), method.loc)
					continue
				if method.body is not None:
					bodies.append((method, fn_type, target))

	def _collect_trait_impl(
		self,
		impl: ast.ImplDef,
		trait_segments: list[str],
		target: TypeDesc,
		bodies: list,
	) -> None:
		trait_path = self._lookup_trait(trait_segments)
		if trait_path is None:
			self._error(f"cannot find trait `{'::'.join(trait_segments)}` in this scope", impl.loc)
			return
		try:
			self._registry.register_trait_impl(trait_path=trait_path, target=target)
		except ValueError as err:
			self._error(str(err), impl.loc)
			return
		for method in impl.methods:
			if self._registry.get_trait_method(trait_path, method.name) is None:
				self._error(f"method `{method.name}` is not a member of trait `{trait_path}`", method.loc)
				continue
			if method.body is not None:
				fn_type, _mode = self._fn_type(method, self_type=target)
				bodies.append((method, fn_type, target))

	def _collect_functions(self, bodies: list) -> None:
		for fn in self._program.functions:
			fn_type, _mode = self._fn_type(fn, self_type=None)
			try:
				self._registry.register_free_function(path="::".join(fn.path), fn_type=fn_type)
			except ValueError as err:
				self._error(str(err), fn.loc)
				continue
			if fn.body is not None:
				bodies.append((fn, fn_type, None))

	def _fn_type(self, fn: ast.FunctionDef, *, self_type: Optional[TypeDesc]) -> Tuple[TypeDesc, Optional[SelfMode]]:
		params: list[TypeDesc] = []
		mode: Optional[SelfMode] = None
		sp = fn.self_param
		if sp is not None:
			if self_type is None:
				raise TypeError(f"`self` receiver on '{'::'.join(fn.path)}' outside a trait or impl")
			if sp.mode == "value":
				mode = SelfMode.SELF_BY_VALUE
				params.append(self_type)
			elif sp.mode == "ref":
				mode = SelfMode.SELF_BY_REF
				params.append(T.ref(self_type))
			elif sp.mode == "ref_mut":
				mode = SelfMode.SELF_BY_REF_MUT
				params.append(T.ref(self_type, mutable=True))
			elif sp.mode == "typed" and sp.type_expr is not None:
				mode = SelfMode.SELF_TYPED
				params.append(self._resolve_type(sp.type_expr, self_type))
			else:
				raise ValueError(f"unsupported `self` receiver {sp.mode!r} on '{'::'.join(fn.path)}'")
		for p in fn.params:
			params.append(self._resolve_type(p.type_expr, self_type))
		ret = self._resolve_type(fn.ret, self_type) if fn.ret is not None else T.UNIT
		return T.function(tuple(params), ret, unsafe=fn.unsafe), mode

	def _lookup_trait(self, segments: list[str]) -> Optional[str]:
		full = "::".join(segments)
		if self._registry.has_trait(full):
			return full
		if len(segments) == 1:
			matches = [p for p in self._registry.trait_paths() if p.rsplit("::", 1)[-1] == segments[0]]
			if len(matches) == 1:
				return matches[0]
		return None

	def _resolve_type(self, texpr: ast.TypeExpr, self_type: Optional[TypeDesc]) -> TypeDesc:
		return self._resolver.resolve(texpr, self_type=self_type, diag=self._diagnostics.append)

	# --- bodies ---

	def _check_function(self, hfn: H.HFunction, fn_type: TypeDesc, self_type: Optional[TypeDesc]) -> None:
		self._self_type = self_type
		self._scopes.append({})
		try:
			for param, pty in zip(hfn.params, fn_type.fn_params):
				self._bind_pattern(param.pat, pty)
			for stmt in hfn.body.statements:
				self._check_stmt(stmt)
		finally:
			self._scopes.pop()
			self._self_type = None

	def _check_stmt(self, stmt: H.HStmt) -> None:
		if isinstance(stmt, H.HLet):
			declared = None
			if stmt.declared_type_expr is not None:
				declared = self._resolve_type(stmt.declared_type_expr, self._self_type)
			ty = self._check_expr(stmt.value, declared)
			if declared is not None:
				self._coerce(stmt.value, ty, declared)
			self._bind_pattern(stmt.pat, declared if declared is not None else ty)
			return
		if isinstance(stmt, H.HExprStmt):
			self._check_expr(stmt.expr, None)
			return
		raise NotImplementedError(f"unsupported statement {type(stmt).__name__}")

	def _check_expr(self, expr: H.HExpr, expected: Optional[TypeDesc]) -> TypeDesc:
		ty = self._infer(expr, expected)
		self._tables.expr_types[expr.node_id] = ty
		return ty

	def _infer(self, expr: H.HExpr, expected: Optional[TypeDesc]) -> TypeDesc:
		if isinstance(expr, H.HLiteralInt):
			if expected is not None and expected.kind in (TypeKind.INT, TypeKind.UINT):
				return expected
			return T.int_type("i32")
		if isinstance(expr, H.HLiteralString):
			return T.ref(T.STR)
		if isinstance(expr, H.HPath):
			return self._check_path(expr, expected)
		if isinstance(expr, H.HBorrow):
			inner_expected = expected.params[0] if expected is not None and expected.kind is TypeKind.REF else None
			return T.ref(self._check_expr(expr.subject, inner_expected), mutable=expr.is_mut)
		if isinstance(expr, H.HDeref):
			return self._check_deref(expr)
		if isinstance(expr, H.HField):
			# Fields are not declared in fixtures.
			self._check_expr(expr.subject, None)
			return T.UNKNOWN
		if isinstance(expr, H.HCall):
			return self._check_call(expr)
		if isinstance(expr, H.HMethodCall):
			return self._check_method_call(expr)
		if isinstance(expr, H.HLambda):
			return self._check_lambda(expr, expected)
		raise NotImplementedError(f"unsupported expression {type(expr).__name__}")

	def _check_path(self, expr: H.HPath, expected: Optional[TypeDesc]) -> TypeDesc:
		if expr.is_single():
			local = self._lookup_local(expr.segments[0])
			if local is not None:
				if local.ty is None:
					if expected is not None and expected.kind is not TypeKind.UNKNOWN:
						local.ty = expected
					else:
						self._error(f"type annotations needed for `{local.name}`", expr.span)
						local.ty = T.UNKNOWN
				return local.ty
		decl = self._registry.get_free(expr.name)
		if decl is not None:
			self._tables.path_resolutions[expr.node_id] = decl
			return decl.fn_type
		if expr.is_single():
			self._error(f"cannot find value `{expr.name}` in this scope", expr.span)
			return T.UNKNOWN
		return self._check_associated_path(expr)

	def _check_associated_path(self, expr: H.HPath) -> TypeDesc:
		prefix, name = expr.segments[:-1], expr.segments[-1]
		owner: Optional[TypeDesc] = None
		trait_path: Optional[str] = None
		if len(prefix) == 1 and prefix[0] == "Self" and self._self_type is not None:
			owner = self._self_type
		elif len(prefix) == 1 and T.primitive(prefix[0]) is not None:
			owner = T.primitive(prefix[0])
		else:
			struct_path = self._resolver.lookup_struct(prefix)
			if struct_path is not None:
				owner = T.nominal(struct_path)
			else:
				trait_path = self._lookup_trait(prefix)
		if owner is None and trait_path is None:
			self._error(f"failed to resolve: use of undeclared type or module `{'::'.join(prefix)}`", expr.span)
			return T.UNKNOWN
		try:
			decl = resolve_associated_path(self._registry, owner=owner, trait_path=trait_path, name=name)
		except ResolutionError as err:
			self._error(str(err), expr.span)
			return T.UNKNOWN
		self._tables.path_resolutions[expr.node_id] = decl
		if owner is not None:
			return subst_self(decl.fn_type, owner)
		return decl.fn_type

	def _check_deref(self, expr: H.HDeref) -> TypeDesc:
		ty = self._check_expr(expr.subject, None)
		if ty.kind is TypeKind.REF:
			return ty.params[0]
		if ty.kind is TypeKind.NOMINAL and ty.name in self._deref_targets:
			return self._deref_targets[ty.name]
		if ty.kind is not TypeKind.UNKNOWN:
			self._error(f"type `{ty}` cannot be dereferenced", expr.span)
		return T.UNKNOWN

	def _check_call(self, expr: H.HCall) -> TypeDesc:
		fn_ty = self._check_expr(expr.fn, None)
		if fn_ty.kind is TypeKind.FUNCTION:
			return self._check_args(expr, expr.args, fn_ty.fn_params, fn_ty.fn_ret, what="function")
		if fn_ty.kind is not TypeKind.UNKNOWN:
			self._error(f"expected function, found `{fn_ty}`", expr.fn.span)
		for arg in expr.args:
			self._check_expr(arg, None)
		return T.UNKNOWN

	def _check_method_call(self, expr: H.HMethodCall) -> TypeDesc:
		recv_ty = self._check_expr(expr.receiver, None)
		if recv_ty.kind is TypeKind.UNKNOWN:
			for arg in expr.args:
				self._check_expr(arg, None)
			return T.UNKNOWN
		try:
			res = resolve_method_call(
				self._registry,
				self._deref_targets,
				receiver_type=recv_ty,
				method_name=expr.method_name,
			)
		except ResolutionError as err:
			self._error(str(err), expr.span)
			for arg in expr.args:
				self._check_expr(arg, None)
			return T.UNKNOWN
		self._tables.method_resolutions[expr.node_id] = res
		if res.receiver_adjusted:
			self._tables.adjusted.add(expr.receiver.node_id)
		fn_ty = subst_self(res.decl.fn_type, res.step_type)
		return self._check_args(expr, expr.args, fn_ty.fn_params[1:], fn_ty.fn_ret, what="method")

	def _check_args(
		self,
		call: H.HExpr,
		args: List[H.HExpr],
		params: Tuple[TypeDesc, ...],
		ret: TypeDesc,
		*,
		what: str,
	) -> TypeDesc:
		if len(args) != len(params):
			plural = "" if len(params) == 1 else "s"
			self._error(
				f"this {what} takes {len(params)} argument{plural} but {len(args)} were supplied",
				call.span,
			)
			for arg in args:
				self._check_expr(arg, None)
			return ret
		for arg, pty in zip(args, params):
			ty = self._check_expr(arg, pty)
			self._coerce(arg, ty, pty)
		return ret

	def _check_lambda(self, expr: H.HLambda, expected: Optional[TypeDesc]) -> TypeDesc:
		exp_params: Optional[Tuple[TypeDesc, ...]] = None
		exp_ret: Optional[TypeDesc] = None
		if expected is not None and expected.kind is TypeKind.FUNCTION and len(expected.fn_params) == len(expr.params):
			exp_params = expected.fn_params
			exp_ret = expected.fn_ret
		self._scopes.append({})
		try:
			for idx, param in enumerate(expr.params):
				pty: Optional[TypeDesc] = None
				if param.type_expr is not None:
					pty = self._resolve_type(param.type_expr, self._self_type)
				elif exp_params is not None:
					pty = exp_params[idx]
				self._bind_pattern(param.pat, pty)
			ret_expected = exp_ret
			if expr.ret_type is not None:
				ret_expected = self._resolve_type(expr.ret_type, self._self_type)
			body_ty = self._check_expr(expr.body_expr, ret_expected)
			if ret_expected is not None:
				self._coerce(expr.body_expr, body_ty, ret_expected)
			param_types = tuple(self._param_type(param) for param in expr.params)
		finally:
			self._scopes.pop()
		return T.function(param_types, ret_expected if ret_expected is not None else body_ty)

	def _param_type(self, param: H.HParam) -> TypeDesc:
		if isinstance(param.pat, H.HBindingPat):
			local = self._lookup_local(param.pat.name)
			if local is not None and local.ty is not None:
				return local.ty
		if param.type_expr is not None:
			return self._resolve_type(param.type_expr, self._self_type)
		return T.UNKNOWN

	# --- coercions ---

	def _coerce(self, expr: H.HExpr, actual: TypeDesc, expected: TypeDesc) -> None:
		"""Accept `actual` where `expected` is needed, recording adjustments."""
		lenient = (TypeKind.UNKNOWN, TypeKind.PARAM)
		if expected.kind in lenient or actual.kind in lenient or actual == expected:
			return
		if self._is_ref_coercion(actual, expected):
			self._tables.adjusted.add(expr.node_id)
			return
		if actual.kind is TypeKind.FUNCTION and expected.kind is TypeKind.FUNCTION:
			if len(actual.fn_params) == len(expected.fn_params) and (expected.unsafe or not actual.unsafe):
				if actual.unsafe != expected.unsafe:
					self._tables.adjusted.add(expr.node_id)
				return
		self._error(f"mismatched types: expected `{expected}`, found `{actual}`", expr.span)

	def _is_ref_coercion(self, actual: TypeDesc, expected: TypeDesc) -> bool:
		if actual.kind is not TypeKind.REF or expected.kind is not TypeKind.REF:
			return False
		if expected.ref_mut and not actual.ref_mut:
			return False
		a_inner, e_inner = actual.params[0], expected.params[0]
		if a_inner == e_inner:
			return True
		if a_inner.kind is TypeKind.ARRAY and e_inner.kind is TypeKind.SLICE and a_inner.params[0] == e_inner.params[0]:
			return True
		return e_inner in deref_steps(a_inner, self._deref_targets)[1:]

	# --- scopes ---

	def _bind_pattern(self, pat: H.HPattern, ty: Optional[TypeDesc]) -> None:
		scope = self._scopes[-1]
		if isinstance(pat, H.HBindingPat):
			scope[pat.name] = _Local(pat.name, ty)
			return
		if isinstance(pat, H.HTuplePat):
			elems: Optional[Tuple[TypeDesc, ...]] = None
			if ty is not None and ty.kind is TypeKind.TUPLE and len(ty.params) == len(pat.elements):
				elems = ty.params
			elif ty is not None and ty.kind not in (TypeKind.UNKNOWN, TypeKind.TUPLE):
				self._error(f"mismatched types: expected `{ty}`, found tuple", pat.span)
			for idx, elem in enumerate(pat.elements):
				self._bind_pattern(elem, elems[idx] if elems is not None else T.UNKNOWN)
			return
		if isinstance(pat, H.HRefPat):
			inner = ty.params[0] if ty is not None and ty.kind is TypeKind.REF else T.UNKNOWN
			self._bind_pattern(pat.inner, inner)
			return
		# Wildcards bind nothing.

	def _lookup_local(self, name: str) -> Optional[_Local]:
		for scope in reversed(self._scopes):
			if name in scope:
				return scope[name]
		return None

	def _error(self, message: str, loc: object) -> None:
		span = loc if isinstance(loc, Span) else Span.from_loc(loc).with_file(self._file)
		self._diagnostics.append(Diagnostic(message=message, phase="typecheck", severity="error", span=span))


def check_program(program: ast.Program, *, file: str | None = None) -> CheckResult:
	"""Type-check a parsed program."""
	return Checker(program, file=file).check()


__all__ = ["Checker", "CheckResult", "CallableDecl", "check_program"]
