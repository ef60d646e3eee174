# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Front-end pipeline used by the CLI and the end-to-end tests:

  source --parse--> AST --lower/check--> HIR + typed tables --lints--> diagnostics

Each stage reports through `Diagnostic` lists; a stage that produced errors
stops the pipeline for that file.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from etalint.checker import CheckResult, check_program
from etalint.core.diagnostics import Diagnostic, has_errors
from etalint.lints import LintConfig, run_lints
from etalint.parser import parse_fixture


def check_source(source: str, *, file: str | None = None) -> Tuple[Optional[CheckResult], List[Diagnostic]]:
	"""Parse and type-check `source`; the result is None when parsing failed."""
	program, diagnostics = parse_fixture(source, file=file)
	if program is None:
		return None, diagnostics
	result = check_program(program, file=file)
	return result, [*diagnostics, *result.diagnostics]


def lint_source(source: str, *, file: str | None = None, config: LintConfig | None = None) -> List[Diagnostic]:
	"""
	Run the whole pipeline over `source`.

	Returns the front-end errors when there are any, otherwise the lint
	diagnostics sorted by position.
	"""
	result, diagnostics = check_source(source, file=file)
	if result is None or has_errors(diagnostics):
		return diagnostics
	return [*diagnostics, *run_lints(result.functions, result.query, config=config)]


__all__ = ["check_source", "lint_source"]
