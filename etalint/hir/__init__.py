# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
etalint.hir: HIR node definitions, AST → HIR lowering and traversal helpers.
"""

from .hir_nodes import *  # noqa: F401,F403
from .hir_nodes import __all__ as _hir_all
from .ast_to_hir import AstToHIR
from .node_ids import assign_node_ids

__all__ = [*_hir_all, "AstToHIR", "assign_node_ids"]
