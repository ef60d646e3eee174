# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
AST → HIR lowering.

Pipeline placement:
  AST (etalint/parser/ast.py) → HIR (etalint/hir/hir_nodes.py) → checker

Sugar removed here:
  - macro invocations are replaced by their expansion; every node inside an
    expansion gets a span marked `from_external_macro`
  - `self` receivers become ordinary parameters named `self`

Entry points (stage API):
  - lower_expr: lower a single expression to HIR
  - lower_block: lower a statement list into an HBlock
  - lower_function: lower a function definition with a body
"""

from __future__ import annotations

from typing import List

from etalint.core.span import Span
from etalint.parser import ast
from . import hir_nodes as H
from .node_ids import assign_node_ids


class AstToHIR:
	"""
	AST → HIR lowering.

	Helper visitors are prefixed with an underscore; anything without a leading
	underscore is intended for callers of this stage.
	"""

	def __init__(self, *, file: str | None = None) -> None:
		self._file = file
		# Nesting depth of macro expansions currently being lowered.
		self._macro_depth = 0
		self._next_node_id = 1

	def lower_function(self, fn: ast.FunctionDef) -> H.HFunction:
		"""
		Lower a function with a body and assign NodeIds.

		The receiver becomes a plain `self` parameter without a type
		expression; the checker types it from the method's signature.
		"""
		if fn.body is None:
			raise ValueError(f"function '{'::'.join(fn.path)}' has no body to lower")
		params: list[H.HParam] = []
		if fn.self_param is not None:
			params.append(
				H.HParam(
					pat=H.HBindingPat(name="self", span=self._span(fn.self_param.loc)),
					type_expr=None,
					span=self._span(fn.self_param.loc),
				)
			)
		for p in fn.params:
			params.append(
				H.HParam(
					pat=H.HBindingPat(name=p.name, span=self._span(p.loc)),
					type_expr=p.type_expr,
					span=self._span(p.loc),
				)
			)
		hfn = H.HFunction(
			name="::".join(fn.path),
			params=params,
			body=self.lower_block(fn.body),
			ret_type=fn.ret,
			is_unsafe=fn.unsafe,
			span=self._span(fn.loc),
		)
		# NodeIds are unique across every function lowered by this instance so
		# one set of side tables can serve a whole file.
		self._next_node_id = assign_node_ids(hfn, start=self._next_node_id)
		return hfn

	def lower_block(self, stmts: List[ast.LetStmt | ast.ExprStmt]) -> H.HBlock:
		return H.HBlock(statements=[self._lower_stmt(s) for s in stmts])

	def lower_expr(self, expr: ast.Expr) -> H.HExpr:
		"""
		Lower a single expression to HIR.

		Dispatches to a private visitor based on the AST node class.
		"""
		method = getattr(self, f"_visit_expr_{type(expr).__name__}", None)
		if method is None:
			raise NotImplementedError(f"No HIR lowering for expr type {type(expr).__name__}")
		return method(expr)

	# --- statements ---

	def _lower_stmt(self, stmt: ast.LetStmt | ast.ExprStmt) -> H.HStmt:
		if isinstance(stmt, ast.LetStmt):
			return H.HLet(
				pat=H.HBindingPat(name=stmt.name, is_mut=stmt.mutable, span=self._span(stmt.loc)),
				value=self.lower_expr(stmt.value),
				declared_type_expr=stmt.type_expr,
				span=self._span(stmt.loc),
			)
		if isinstance(stmt, ast.ExprStmt):
			return H.HExprStmt(expr=self.lower_expr(stmt.expr), span=self._span(stmt.loc))
		raise NotImplementedError(f"No HIR lowering for stmt type {type(stmt).__name__}")

	# --- expressions ---

	def _visit_expr_Path(self, expr: ast.Path) -> H.HExpr:
		return H.HPath(segments=list(expr.segments), span=self._span(expr.loc))

	def _visit_expr_IntLiteral(self, expr: ast.IntLiteral) -> H.HExpr:
		return H.HLiteralInt(value=expr.value, span=self._span(expr.loc))

	def _visit_expr_StrLiteral(self, expr: ast.StrLiteral) -> H.HExpr:
		return H.HLiteralString(value=expr.value, span=self._span(expr.loc))

	def _visit_expr_Borrow(self, expr: ast.Borrow) -> H.HExpr:
		return H.HBorrow(subject=self.lower_expr(expr.operand), is_mut=expr.mutable, span=self._span(expr.loc))

	def _visit_expr_Deref(self, expr: ast.Deref) -> H.HExpr:
		return H.HDeref(subject=self.lower_expr(expr.operand), span=self._span(expr.loc))

	def _visit_expr_Field(self, expr: ast.Field) -> H.HExpr:
		return H.HField(subject=self.lower_expr(expr.subject), name=expr.name, span=self._span(expr.loc))

	def _visit_expr_Call(self, expr: ast.Call) -> H.HExpr:
		return H.HCall(
			fn=self.lower_expr(expr.func),
			args=[self.lower_expr(a) for a in expr.args],
			span=self._span(expr.loc),
		)

	def _visit_expr_MethodCall(self, expr: ast.MethodCall) -> H.HExpr:
		return H.HMethodCall(
			receiver=self.lower_expr(expr.receiver),
			method_name=expr.method,
			args=[self.lower_expr(a) for a in expr.args],
			span=self._span(expr.loc),
		)

	def _visit_expr_Closure(self, expr: ast.Closure) -> H.HExpr:
		params = [
			H.HParam(pat=self._lower_pattern(p.pattern), type_expr=p.type_expr, span=self._span(p.loc))
			for p in expr.params
		]
		return H.HLambda(
			params=params,
			body_expr=self.lower_expr(expr.body),
			ret_type=expr.ret_type,
			span=self._span(expr.loc),
		)

	def _visit_expr_MacroCall(self, expr: ast.MacroCall) -> H.HExpr:
		# The invocation itself disappears; only the expansion survives.
		self._macro_depth += 1
		try:
			return self.lower_expr(expr.expansion)
		finally:
			self._macro_depth -= 1

	# --- patterns ---

	def _lower_pattern(self, pat: ast.Pattern) -> H.HPattern:
		if isinstance(pat, ast.BindingPat):
			return H.HBindingPat(name=pat.name, is_mut=pat.mutable, span=self._span(pat.loc))
		if isinstance(pat, ast.TuplePat):
			return H.HTuplePat(elements=[self._lower_pattern(p) for p in pat.elements], span=self._span(pat.loc))
		if isinstance(pat, ast.RefPat):
			return H.HRefPat(inner=self._lower_pattern(pat.inner), span=self._span(pat.loc))
		if isinstance(pat, ast.WildcardPat):
			return H.HWildcardPat(span=self._span(pat.loc))
		raise NotImplementedError(f"No HIR lowering for pattern type {type(pat).__name__}")

	def _span(self, loc: object) -> Span:
		span = Span.from_loc(loc).with_file(self._file)
		if self._macro_depth:
			span = span.in_external_macro()
		return span


__all__ = ["AstToHIR"]
