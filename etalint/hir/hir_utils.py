# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
HIR traversal helpers shared by the checker and the lint driver.
"""

from __future__ import annotations

from typing import Iterator, List

from etalint.hir import hir_nodes as H


def iter_expr_children(e: H.HExpr) -> List[H.HExpr]:
	"""Direct expression children of `e`, in field order."""
	children: list[H.HExpr] = []
	for field_name in getattr(e, "__dataclass_fields__", {}) or {}:
		val = getattr(e, field_name, None)
		if isinstance(val, H.HExpr):
			children.append(val)
		elif isinstance(val, list):
			for item in val:
				if isinstance(item, H.HExpr):
					children.append(item)
	return children


def walk_exprs(node: H.HNode) -> Iterator[H.HExpr]:
	"""
	Yield every expression reachable from `node` in pre-order.

	Closure bodies are included, so nested call sites inside closures are
	visited like any other.
	"""
	if isinstance(node, H.HFunction):
		yield from walk_exprs(node.body)
		return
	if isinstance(node, H.HBlock):
		for stmt in node.statements:
			yield from walk_exprs(stmt)
		return
	if isinstance(node, H.HLet):
		yield from walk_exprs(node.value)
		return
	if isinstance(node, H.HExprStmt):
		yield from walk_exprs(node.expr)
		return
	if isinstance(node, H.HExpr):
		yield node
		for child in iter_expr_children(node):
			yield from walk_exprs(child)


__all__ = ["iter_expr_children", "walk_exprs"]
