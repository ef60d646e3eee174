# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lint driver: walks checked functions and runs the lint passes.
"""

from __future__ import annotations

from typing import Iterable, List

from etalint.core.diagnostics import Diagnostic
from etalint.core.types_protocol import TypeQuery
from etalint.hir import hir_nodes as H
from etalint.hir.hir_utils import walk_exprs
from .eta_reduction import EtaPass
from .lint_defs import LintConfig


def default_passes(config: LintConfig | None = None) -> list:
	return [EtaPass(config)]


def run_lints(
	functions: Iterable[H.HFunction],
	query: TypeQuery,
	*,
	config: LintConfig | None = None,
	passes: list | None = None,
) -> List[Diagnostic]:
	"""Run every pass over every expression; results are sorted by span."""
	if passes is None:
		passes = default_passes(config)
	diagnostics: list[Diagnostic] = []
	for fn in functions:
		for expr in walk_exprs(fn):
			for lint_pass in passes:
				diagnostics.extend(lint_pass.check_expr(query, expr))
	diagnostics.sort(key=lambda d: d.span.sort_key())
	return diagnostics


__all__ = ["default_passes", "run_lints"]
