# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lint findings and their conversion to diagnostics.

A `Finding` is span-independent: detectors know what to replace the closure
with, the pass knows where the closure is. `finding_to_diagnostic` joins the
two and attaches the fix-it suggestion.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from etalint.core.diagnostics import Applicability, Diagnostic, Suggestion
from etalint.core.span import Span
from .lint_defs import Level, LintDef


class FindingKind(Enum):
	REDUNDANT = auto()


@dataclass(frozen=True)
class Finding:
	"""Detector result; `replacement_text` is None when no snippet is available."""

	kind: FindingKind
	replacement_text: Optional[str]


def finding_to_diagnostic(finding: Finding, *, lint: LintDef, level: Level, span: Span) -> Diagnostic:
	"""Render `finding` for the closure at `span` as a lint diagnostic at `level`."""
	suggestions: list[Suggestion] = []
	if finding.replacement_text is not None:
		suggestions.append(
			Suggestion(
				message=lint.suggestion,
				replacement=finding.replacement_text,
				span=span,
				applicability=lint.applicability,
			)
		)
	return Diagnostic(
		message=lint.message,
		code=lint.name,
		phase="lint",
		severity=level.severity,
		span=span,
		notes=[f"`{lint.name}` is set to `{level.value}`"],
		suggestions=suggestions,
	)


__all__ = ["Finding", "FindingKind", "finding_to_diagnostic"]
