# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Fixture-language parser.

Parses etalint fixture source (see `grammar.lark`) into the AST in `ast.py`
and adapts parse failures into parser-phase diagnostics.
"""

from __future__ import annotations

from typing import Optional, Tuple

from lark.exceptions import UnexpectedInput

from . import ast as parser_ast
from . import parser as _parser
from .parser import FixtureParseError, parse_program
from etalint.core.diagnostics import Diagnostic
from etalint.core.span import Span


def parse_fixture(source: str, *, file: str | None = None) -> Tuple[Optional[parser_ast.Program], list[Diagnostic]]:
	"""
	Parse `source`, returning `(program, diagnostics)`.

	On failure the program is None and the diagnostics list holds exactly one
	parser-phase error.
	"""
	try:
		return _parser.parse_program(source), []
	except FixtureParseError as err:
		span = Span.from_loc(err.loc).with_file(file)
		return None, [Diagnostic(message=str(err), phase="parser", severity="error", span=span)]
	except UnexpectedInput as err:
		span = Span(
			file=file,
			line=getattr(err, "line", None),
			column=getattr(err, "column", None),
			raw=err,
		)
		lines = str(err).strip().splitlines()
		message = f"syntax error: {lines[0] if lines else type(err).__name__}"
		return None, [Diagnostic(message=message, phase="parser", severity="error", span=span)]


__all__ = ["FixtureParseError", "parse_fixture", "parse_program", "parser_ast"]
