# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
High-level Intermediate Representation (HIR).

Pipeline placement:
  fixture source → AST (etalint/parser/ast.py) → HIR (this file) → typed side tables → lints

The HIR is a small, sugar-free tree. Macro invocations are already expanded
(their spans carry the external-macro flag) and method calls carry an explicit
receiver.

Guiding rules:
- Nodes are purely syntactic; types and resolutions live in checker side tables
  keyed by `node_id`.
- Type annotations are kept as opaque parser type expressions; the checker
  resolves them.
- Every expression carries a `span` (`Span()` when unknown).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from etalint.core.span import Span

# Stable identifiers for HIR nodes (used by typed side tables).
NodeId = int


# Base node kinds

class HNode:
	"""Base class for all HIR nodes."""
	node_id: NodeId = 0


class HExpr(HNode):
	"""Base class for all HIR expressions."""
	pass


class HStmt(HNode):
	"""Base class for all HIR statements."""
	pass


class HPattern(HNode):
	"""Base class for binding patterns (closure params, lets)."""
	pass


# Patterns

@dataclass
class HBindingPat(HPattern):
	"""Simple name binding: `x` or `mut x`."""
	name: str
	is_mut: bool = False
	span: Span = field(default_factory=Span)


@dataclass
class HTuplePat(HPattern):
	"""Destructuring tuple pattern: `(a, b)`."""
	elements: List[HPattern]
	span: Span = field(default_factory=Span)


@dataclass
class HRefPat(HPattern):
	"""Reference pattern: `&x`."""
	inner: HPattern
	span: Span = field(default_factory=Span)


@dataclass
class HWildcardPat(HPattern):
	"""Wildcard pattern: `_` (binds nothing)."""
	span: Span = field(default_factory=Span)


# Expressions

@dataclass
class HPath(HExpr):
	"""
	Path expression: `x`, `foo`, `module::foo`, `Type::method`.

	A reference to a local is always a single-segment path; resolution to a
	local, free function or associated item happens in the checker.
	"""
	segments: List[str]
	span: Span = field(default_factory=Span)

	@property
	def name(self) -> str:
		return "::".join(self.segments)

	def is_single(self) -> bool:
		return len(self.segments) == 1


@dataclass
class HLiteralInt(HExpr):
	"""Integer literal (as parsed)."""
	value: int
	span: Span = field(default_factory=Span)


@dataclass
class HLiteralString(HExpr):
	"""String literal; typed as `&str`."""
	value: str
	span: Span = field(default_factory=Span)


@dataclass
class HBorrow(HExpr):
	"""Borrow: `&subject` or `&mut subject`."""
	subject: HExpr
	is_mut: bool = False
	span: Span = field(default_factory=Span)


@dataclass
class HDeref(HExpr):
	"""Dereference: `*subject`."""
	subject: HExpr
	span: Span = field(default_factory=Span)


@dataclass
class HField(HExpr):
	"""Field access: `subject.name` (fields are untyped in fixtures)."""
	subject: HExpr
	name: str
	span: Span = field(default_factory=Span)


@dataclass
class HCall(HExpr):
	"""Plain call: fn(args...)."""
	fn: HExpr
	args: List[HExpr]
	span: Span = field(default_factory=Span)


@dataclass
class HMethodCall(HExpr):
	"""
	Method call with explicit receiver.

	Example: `obj.foo(1, 2)` becomes:
	    HMethodCall(receiver=HPath(["obj"]), method_name="foo", args=[HLiteralInt(1), HLiteralInt(2)])
	"""
	receiver: HExpr
	method_name: str
	args: List[HExpr]
	span: Span = field(default_factory=Span)


@dataclass
class HParam(HNode):
	"""Closure or function parameter: pattern plus optional declared type."""
	pat: HPattern
	type_expr: Optional[object] = None
	span: Span = field(default_factory=Span)


@dataclass
class HLambda(HExpr):
	"""Closure expression `|params| [-> ret] body`; the body is one expression."""
	params: List[HParam]
	body_expr: HExpr
	ret_type: Optional[object] = None
	span: Span = field(default_factory=Span)


# Statements

@dataclass
class HLet(HStmt):
	"""Local binding: `let [mut] name [: T] = value;`."""
	pat: HBindingPat
	value: HExpr
	declared_type_expr: Optional[object] = None
	span: Span = field(default_factory=Span)


@dataclass
class HExprStmt(HStmt):
	"""Expression statement: `expr;`."""
	expr: HExpr
	span: Span = field(default_factory=Span)


@dataclass
class HBlock(HStmt):
	"""Sequence of statements."""
	statements: List[HStmt]


@dataclass
class HFunction(HNode):
	"""Function with a body; bodies are the lint roots."""
	name: str
	params: List[HParam]
	body: HBlock
	ret_type: Optional[object] = None
	is_unsafe: bool = False
	span: Span = field(default_factory=Span)


__all__ = [
	"NodeId",
	"HNode",
	"HExpr",
	"HStmt",
	"HPattern",
	"HBindingPat",
	"HTuplePat",
	"HRefPat",
	"HWildcardPat",
	"HPath",
	"HLiteralInt",
	"HLiteralString",
	"HBorrow",
	"HDeref",
	"HField",
	"HCall",
	"HMethodCall",
	"HParam",
	"HLambda",
	"HLet",
	"HExprStmt",
	"HBlock",
	"HFunction",
]
