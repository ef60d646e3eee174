from __future__ import annotations

import codecs
from pathlib import Path
from typing import List, Optional

from lark import Lark, Token, Tree

from .ast import (
    ArrayType,
    BindingPat,
    Borrow,
    Call,
    Closure,
    ClosureParam,
    Deref,
    Expr,
    ExprStmt,
    Field,
    FnPtrType,
    FunctionDef,
    ImplDef,
    IntLiteral,
    LetStmt,
    Located,
    MacroCall,
    MethodCall,
    NamedType,
    Param,
    Path as PathExpr,
    Pattern,
    Program,
    RefPat,
    RefType,
    SelfParam,
    SliceType,
    StrLiteral,
    StructDef,
    TraitDef,
    TupleType,
    TuplePat,
    TypeExpr,
    WildcardPat,
)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()


class FixtureParseError(ValueError):
	"""
	User-facing error raised while building the AST from a parse tree.

	The grammar accepts a few shapes that are only rejected structurally (for
	example a `self` receiver outside of a trait/impl). This is a `ValueError`
	subclass carrying a best-effort location so the front-end adapter can turn
	it into a parser-phase diagnostic instead of crashing.
	"""

	def __init__(self, message: str, *, loc: Optional[Located]) -> None:
		super().__init__(message)
		self.loc = loc


_PARSER = Lark(
    _GRAMMAR_SRC,
    parser="lalr",
    lexer="basic",
    start="start",
    propagate_positions=True,
    maybe_placeholders=False,
)


def parse_program(source: str) -> Program:
    """
    Parse fixture source into a Program.

    Raises `lark.exceptions.UnexpectedInput` on syntax errors and
    `FixtureParseError` on structurally invalid declarations.
    """
    tree = _PARSER.parse(source)
    program = _build_program(tree)
    program.source = source
    return program


def _build_program(tree: Tree) -> Program:
    program = Program()
    for child in tree.children:
        if not isinstance(child, Tree):
            continue
        kind = _name(child)
        if kind == "struct_def":
            program.structs.append(_build_struct(child))
        elif kind == "trait_def":
            program.traits.append(_build_trait(child))
        elif kind in ("inherent_impl", "trait_impl"):
            program.impls.append(_build_impl(child))
        elif kind == "fn_def":
            fn = _build_fn(child, allow_self=False)
            program.functions.append(fn)
        else:
            raise TypeError(f"Unexpected item node: {kind}")
    return program


def _build_struct(tree: Tree) -> StructDef:
    path = _build_path(_child(tree, "path"))
    deref_tree = _find_child(tree, "deref_target")
    deref_target = None
    if deref_tree is not None:
        deref_target = _build_type(_only_tree(deref_tree))
    return StructDef(path=path, deref_target=deref_target, loc=_loc(tree))


def _build_trait(tree: Tree) -> TraitDef:
    path = _build_path(_child(tree, "path"))
    methods = [_build_fn(c, allow_self=True) for c in _children(tree, "fn_def")]
    return TraitDef(path=path, methods=methods, loc=_loc(tree))


def _build_impl(tree: Tree) -> ImplDef:
    methods = [_build_fn(c, allow_self=True) for c in _children(tree, "fn_def")]
    if _name(tree) == "trait_impl":
        trees = [c for c in tree.children if isinstance(c, Tree) and _name(c) != "fn_def"]
        if len(trees) != 2:
            raise ValueError("trait impl requires a trait path and a target type")
        trait_path = _build_path(trees[0])
        target = _build_type(trees[1])
        return ImplDef(target=target, methods=methods, loc=_loc(tree), trait_path=trait_path)
    target_tree = next(c for c in tree.children if isinstance(c, Tree) and _name(c) != "fn_def")
    return ImplDef(target=_build_type(target_tree), methods=methods, loc=_loc(tree))


def _build_fn(tree: Tree, *, allow_self: bool) -> FunctionDef:
    unsafe = any(isinstance(c, Token) and c.type == "UNSAFE" for c in tree.children)
    path = _build_path(_child(tree, "path"))
    params: List[Param] = []
    self_param: Optional[SelfParam] = None
    params_tree = _find_child(tree, "fn_params")
    if params_tree is not None:
        for idx, p in enumerate(c for c in params_tree.children if isinstance(c, Tree)):
            kind = _name(p)
            if kind == "param":
                name_tok = _first_token(p, "NAME")
                params.append(Param(name=name_tok.value, type_expr=_build_type(_only_tree(p)), loc=_loc(p)))
                continue
            if not allow_self:
                raise FixtureParseError("`self` receiver is only allowed on trait or impl methods", loc=_loc(p))
            if idx != 0:
                raise FixtureParseError("`self` receiver must be the first parameter", loc=_loc(p))
            self_param = _build_self_param(p)
    ret_tree = _find_child(tree, "ret_type")
    ret = _build_type(_only_tree(ret_tree)) if ret_tree is not None else None
    body_tree = _find_child(tree, "block")
    body = None
    if body_tree is not None:
        body = [_build_stmt(s) for s in body_tree.children if isinstance(s, Tree)]
    return FunctionDef(
        path=path,
        params=params,
        ret=ret,
        body=body,
        loc=_loc(tree),
        unsafe=unsafe,
        self_param=self_param,
    )


def _build_self_param(tree: Tree) -> SelfParam:
    kind = _name(tree)
    if kind == "self_value":
        return SelfParam(mode="value", loc=_loc(tree))
    if kind == "self_ref":
        return SelfParam(mode="ref", loc=_loc(tree))
    if kind == "self_ref_mut":
        return SelfParam(mode="ref_mut", loc=_loc(tree))
    if kind == "self_typed":
        return SelfParam(mode="typed", loc=_loc(tree), type_expr=_build_type(_only_tree(tree)))
    raise TypeError(f"Unexpected self param node: {kind}")


def _build_stmt(tree: Tree) -> LetStmt | ExprStmt:
    kind = _name(tree)
    if kind == "let_stmt":
        mutable = any(isinstance(c, Token) and c.type == "MUT" for c in tree.children)
        name_tok = _first_token(tree, "NAME")
        annot = _find_child(tree, "type_annot")
        type_expr = _build_type(_only_tree(annot)) if annot is not None else None
        value_tree = [c for c in tree.children if isinstance(c, Tree) and _name(c) != "type_annot"]
        if len(value_tree) != 1:
            raise ValueError("let statement missing initializer")
        return LetStmt(
            name=name_tok.value,
            mutable=mutable,
            type_expr=type_expr,
            value=_build_expr(value_tree[0]),
            loc=_loc(tree),
        )
    if kind == "expr_stmt":
        return ExprStmt(expr=_build_expr(_only_tree(tree)), loc=_loc(tree))
    raise TypeError(f"Unexpected statement node: {kind}")


def _build_expr(node: Tree | Token) -> Expr:
    if not isinstance(node, Tree):
        raise TypeError(f"Unexpected node type: {type(node)}")
    name = _name(node)
    loc = _loc(node)
    if name == "path_expr":
        return PathExpr(loc=loc, segments=_build_path(_only_tree(node)))
    if name == "self_expr":
        return PathExpr(loc=loc, segments=["self"])
    if name == "int_lit":
        return IntLiteral(loc=loc, value=int(node.children[0].value))
    if name == "str_lit":
        return StrLiteral(loc=loc, value=_decode_string_token(node.children[0]))
    if name == "macro_call":
        name_tok = _first_token(node, "NAME")
        return MacroCall(loc=loc, name=name_tok.value, expansion=_build_expr(_only_tree(node)))
    if name == "borrow":
        mutable = any(isinstance(c, Token) and c.type == "MUT" for c in node.children)
        return Borrow(loc=loc, operand=_build_expr(_only_tree(node)), mutable=mutable)
    if name == "deref":
        return Deref(loc=loc, operand=_build_expr(_only_tree(node)))
    if name == "call":
        trees = [c for c in node.children if isinstance(c, Tree)]
        func = _build_expr(trees[0])
        args = _build_args(trees[1]) if len(trees) > 1 else []
        return Call(loc=loc, func=func, args=args)
    if name == "method_call":
        trees = [c for c in node.children if isinstance(c, Tree)]
        receiver = _build_expr(trees[0])
        method_tok = _first_token(node, "NAME")
        args = _build_args(trees[1]) if len(trees) > 1 else []
        return MethodCall(loc=loc, receiver=receiver, method=method_tok.value, args=args)
    if name == "field":
        trees = [c for c in node.children if isinstance(c, Tree)]
        return Field(loc=loc, subject=_build_expr(trees[0]), name=_first_token(node, "NAME").value)
    if name == "closure":
        return _build_closure(node)
    raise ValueError(f"Unsupported expression node: {name}")


def _build_args(tree: Tree) -> List[Expr]:
    if _name(tree) != "args":
        raise TypeError(f"Expected args node, got {_name(tree)}")
    return [_build_expr(c) for c in tree.children if isinstance(c, Tree)]


def _build_closure(tree: Tree) -> Closure:
    params: List[ClosureParam] = []
    ret_type: Optional[TypeExpr] = None
    body: Optional[Expr] = None
    for child in tree.children:
        if not isinstance(child, Tree):
            continue
        kind = _name(child)
        if kind == "closure_params":
            for p in child.children:
                if not isinstance(p, Tree):
                    continue
                sub = [c for c in p.children if isinstance(c, Tree)]
                pattern = _build_pattern(sub[0])
                annot = _find_child(p, "type_annot")
                type_expr = _build_type(_only_tree(annot)) if annot is not None else None
                params.append(ClosureParam(pattern=pattern, type_expr=type_expr, loc=_loc(p)))
        elif kind == "ret_type":
            ret_type = _build_type(_only_tree(child))
        else:
            body = _build_expr(child)
    if body is None:
        raise ValueError("closure missing body expression")
    return Closure(loc=_loc(tree), params=params, body=body, ret_type=ret_type)


def _build_pattern(tree: Tree) -> Pattern:
    kind = _name(tree)
    loc = _loc(tree)
    if kind == "bind_pat":
        mutable = any(isinstance(c, Token) and c.type == "MUT" for c in tree.children)
        return BindingPat(loc=loc, name=_first_token(tree, "NAME").value, mutable=mutable)
    if kind == "wild_pat":
        return WildcardPat(loc=loc)
    if kind == "ref_pat":
        return RefPat(loc=loc, inner=_build_pattern(_only_tree(tree)))
    if kind == "tuple_pat":
        return TuplePat(loc=loc, elements=[_build_pattern(c) for c in tree.children if isinstance(c, Tree)])
    raise ValueError(f"Unsupported pattern node: {kind}")


def _build_type(node: Tree | Token) -> TypeExpr:
    if not isinstance(node, Tree):
        raise TypeError(f"Unexpected type node: {node!r}")
    kind = _name(node)
    loc = _loc(node)
    trees = [c for c in node.children if isinstance(c, Tree)]
    if kind == "named_type":
        path = _build_path(trees[0])
        args: List[TypeExpr] = []
        if len(trees) > 1:
            args = [_build_type(c) for c in trees[1].children if isinstance(c, Tree)]
        return NamedType(loc=loc, path=path, args=args)
    if kind == "ref_type":
        mutable = any(isinstance(c, Token) and c.type == "MUT" for c in node.children)
        return RefType(loc=loc, inner=_build_type(trees[0]), mutable=mutable)
    if kind == "array_type":
        length_tok = _first_token(node, "INT")
        return ArrayType(loc=loc, elem=_build_type(trees[0]), length=int(length_tok.value))
    if kind == "slice_type":
        return SliceType(loc=loc, elem=_build_type(trees[0]))
    if kind == "unit_type":
        return TupleType(loc=loc, elements=[])
    if kind == "tuple_type":
        return TupleType(loc=loc, elements=[_build_type(c) for c in trees])
    if kind == "fn_type":
        unsafe = any(isinstance(c, Token) and c.type == "UNSAFE" for c in node.children)
        params: List[TypeExpr] = []
        ret: Optional[TypeExpr] = None
        for c in trees:
            if _name(c) == "type_list":
                params = [_build_type(t) for t in c.children if isinstance(t, Tree)]
            elif _name(c) == "ret_type":
                ret = _build_type(_only_tree(c))
        return FnPtrType(loc=loc, params=params, ret=ret, unsafe=unsafe)
    raise ValueError(f"Unsupported type node: {kind}")


def _build_path(tree: Tree) -> List[str]:
    if _name(tree) != "path":
        raise TypeError(f"Expected path node, got {_name(tree)}")
    return [tok.value for tok in tree.children if isinstance(tok, Token)]


def _decode_string_token(tok: Token) -> str:
	"""Decode a STRING token's Python-style escapes."""
	content = tok.value[1:-1]  # strip quotes
	return codecs.decode(content, "unicode_escape")


def _children(tree: Tree, name: str) -> List[Tree]:
    return [c for c in tree.children if isinstance(c, Tree) and _name(c) == name]


def _find_child(tree: Tree, name: str) -> Optional[Tree]:
    for c in tree.children:
        if isinstance(c, Tree) and _name(c) == name:
            return c
    return None


def _child(tree: Tree, name: str) -> Tree:
    found = _find_child(tree, name)
    if found is None:
        raise ValueError(f"{_name(tree)} missing {name}")
    return found


def _only_tree(tree: Tree) -> Tree:
    trees = [c for c in tree.children if isinstance(c, Tree)]
    if len(trees) != 1:
        raise TypeError(f"{_name(tree)} expects exactly one subtree, got {tree.children!r}")
    return trees[0]


def _first_token(tree: Tree, type_name: str) -> Token:
    for c in tree.children:
        if isinstance(c, Token) and c.type == type_name:
            return c
    raise ValueError(f"{_name(tree)} missing {type_name} token")


def _loc(tree: Tree) -> Located:
    meta = tree.meta
    return Located(
        line=getattr(meta, "line", 0),
        column=getattr(meta, "column", 0),
        end_line=getattr(meta, "end_line", None),
        end_column=getattr(meta, "end_column", None),
        start_pos=getattr(meta, "start_pos", None),
        end_pos=getattr(meta, "end_pos", None),
    )


def _name(node: Tree | Token) -> str:
    if isinstance(node, Tree):
        data = node.data
        if isinstance(data, Token):
            return data.value
        return data
    if isinstance(node, Token):
        return node.type
    return str(node)
