from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class Located:
    line: int
    column: int
    end_line: Optional[int] = None
    end_column: Optional[int] = None
    start_pos: Optional[int] = None
    end_pos: Optional[int] = None


# Types


@dataclass
class TypeExpr:
    loc: Located


@dataclass
class NamedType(TypeExpr):
    path: List[str]
    args: List[TypeExpr] = field(default_factory=list)


@dataclass
class RefType(TypeExpr):
    inner: TypeExpr
    mutable: bool = False


@dataclass
class ArrayType(TypeExpr):
    elem: TypeExpr
    length: int


@dataclass
class SliceType(TypeExpr):
    elem: TypeExpr


@dataclass
class TupleType(TypeExpr):
    elements: List[TypeExpr]


@dataclass
class FnPtrType(TypeExpr):
    params: List[TypeExpr]
    ret: Optional[TypeExpr]
    unsafe: bool = False


# Patterns


@dataclass
class Pattern:
    loc: Located


@dataclass
class BindingPat(Pattern):
    name: str
    mutable: bool = False


@dataclass
class TuplePat(Pattern):
    elements: List[Pattern]


@dataclass
class RefPat(Pattern):
    inner: Pattern


@dataclass
class WildcardPat(Pattern):
    pass


# Expressions


@dataclass
class Expr:
    loc: Located


@dataclass
class Path(Expr):
    segments: List[str]


@dataclass
class IntLiteral(Expr):
    value: int


@dataclass
class StrLiteral(Expr):
    value: str


@dataclass
class Borrow(Expr):
    operand: Expr
    mutable: bool = False


@dataclass
class Deref(Expr):
    operand: Expr


@dataclass
class Field(Expr):
    subject: Expr
    name: str


@dataclass
class Call(Expr):
    func: Expr
    args: List[Expr]


@dataclass
class MethodCall(Expr):
    receiver: Expr
    method: str
    args: List[Expr]


@dataclass
class ClosureParam:
    pattern: Pattern
    type_expr: Optional[TypeExpr]
    loc: Located


@dataclass
class Closure(Expr):
    params: List[ClosureParam]
    body: Expr
    ret_type: Optional[TypeExpr] = None


@dataclass
class MacroCall(Expr):
    """`name!(expr)`; the argument is the macro's expansion."""

    name: str
    expansion: Expr


# Statements


@dataclass
class LetStmt:
    name: str
    mutable: bool
    type_expr: Optional[TypeExpr]
    value: Expr
    loc: Located


@dataclass
class ExprStmt:
    expr: Expr
    loc: Located


# Items


@dataclass
class Param:
    name: str
    type_expr: TypeExpr
    loc: Located


@dataclass
class SelfParam:
    """Method receiver: `self`, `&self`, `&mut self` or `self: T`."""

    mode: str  # "value", "ref", "ref_mut", "typed"
    loc: Located
    type_expr: Optional[TypeExpr] = None


@dataclass
class FunctionDef:
    path: List[str]
    params: List[Param]
    ret: Optional[TypeExpr]
    body: Optional[List[LetStmt | ExprStmt]]
    loc: Located
    unsafe: bool = False
    self_param: Optional[SelfParam] = None

    @property
    def name(self) -> str:
        return self.path[-1]


@dataclass
class StructDef:
    path: List[str]
    deref_target: Optional[TypeExpr]
    loc: Located

    @property
    def name(self) -> str:
        return self.path[-1]


@dataclass
class TraitDef:
    path: List[str]
    methods: List[FunctionDef]
    loc: Located

    @property
    def name(self) -> str:
        return self.path[-1]


@dataclass
class ImplDef:
    target: TypeExpr
    methods: List[FunctionDef]
    loc: Located
    trait_path: Optional[List[str]] = None


@dataclass
class Program:
    structs: List[StructDef] = field(default_factory=list)
    traits: List[TraitDef] = field(default_factory=list)
    impls: List[ImplDef] = field(default_factory=list)
    functions: List[FunctionDef] = field(default_factory=list)
    source: str = ""
