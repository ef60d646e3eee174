# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
etalint command-line driver.

Parses each fixture file, type checks it and runs the lints. Diagnostics are
printed to stderr as `file:line:col: severity: message`, or as one JSON
payload on stdout with `--json`.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List

from etalint.core.diagnostics import Diagnostic, has_errors
from etalint.core.span import Span
from etalint.frontend import lint_source
from etalint.lints import ALL_LINTS, Level, LintConfig


class _LevelAction(argparse.Action):
	"""Collect `-A/-W/-D NAME` in command-line order so the last one wins."""

	def __call__(self, parser, namespace, values, option_string=None):
		overrides = list(getattr(namespace, self.dest, None) or [])
		overrides.append((values, self.const))
		setattr(namespace, self.dest, overrides)


def _diag_to_json(diag: Diagnostic, source: Path) -> dict:
	"""Render a Diagnostic to a structured JSON-friendly dict."""
	file = diag.span.file or str(source)
	return {
		"phase": diag.phase,
		"code": diag.code,
		"message": diag.message,
		"severity": diag.severity,
		"file": file,
		"line": diag.span.line,
		"column": diag.span.column,
		"notes": list(diag.notes),
		"suggestions": [
			{
				"message": s.message,
				"replacement": s.replacement,
				"line": s.span.line,
				"column": s.span.column,
				"end_line": s.span.end_line,
				"end_column": s.span.end_column,
				"applicability": s.applicability.name,
			}
			for s in diag.suggestions
		],
	}


def _render(diag: Diagnostic, source: Path) -> List[str]:
	line = diag.span.line if diag.span.line is not None else "?"
	column = diag.span.column if diag.span.column is not None else "?"
	code = f"[{diag.code}]" if diag.code else ""
	out = [f"{diag.span.file or source}:{line}:{column}: {diag.severity}{code}: {diag.message}"]
	for note in diag.notes:
		out.append(f"  = note: {note}")
	for s in diag.suggestions:
		out.append(f"  = help: {s.message}: `{s.replacement}`")
	return out


def main(argv: list[str] | None = None) -> int:
	"""
	Lint the given fixture files.

	Exit code is 1 when any error-severity diagnostic was produced (including
	lints set to `deny`), otherwise 0.
	"""
	parser = argparse.ArgumentParser(description="etalint: redundant closure lint")
	parser.add_argument("source", type=Path, nargs="+", help="Path(s) to fixture source file(s)")
	parser.add_argument("-A", "--allow", dest="levels", action=_LevelAction, const=Level.ALLOW, metavar="LINT", help="Allow a lint or lint group")
	parser.add_argument("-W", "--warn", dest="levels", action=_LevelAction, const=Level.WARN, metavar="LINT", help="Warn on a lint or lint group")
	parser.add_argument("-D", "--deny", dest="levels", action=_LevelAction, const=Level.DENY, metavar="LINT", help="Deny a lint or lint group")
	parser.add_argument("--json", action="store_true", help="Emit diagnostics as JSON on stdout")
	args = parser.parse_args(argv)

	try:
		config = LintConfig(ALL_LINTS).apply(args.levels or [])
	except ValueError as err:
		parser.error(str(err))

	reports: list[tuple[Path, Diagnostic]] = []
	for source_path in args.source:
		try:
			source = source_path.read_text(encoding="utf-8")
		except (OSError, UnicodeDecodeError) as err:
			reports.append(
				(
					source_path,
					Diagnostic(
						message=f"couldn't read {source_path}: {getattr(err, 'strerror', None) or err}",
						phase="io",
						severity="error",
						span=Span(file=str(source_path)),
					),
				)
			)
			continue
		for d in lint_source(source, file=str(source_path), config=config):
			reports.append((source_path, d))

	exit_code = 1 if has_errors([d for _, d in reports]) else 0
	if args.json:
		payload = {
			"exit_code": exit_code,
			"diagnostics": [_diag_to_json(d, path) for path, d in reports],
		}
		print(json.dumps(payload))
	else:
		for path, d in reports:
			for line in _render(d, path):
				print(line, file=sys.stderr)
	return exit_code


if __name__ == "__main__":  # pragma: no cover
	sys.exit(main())
