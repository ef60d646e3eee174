# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Common diagnostic structure for parser, checker and lint passes.

A diagnostic is a message plus optional span/metadata. Lints attach fix-it
suggestions; the host renders them but never writes them back into files.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

from .span import Span


class Applicability(Enum):
	"""How confident a suggestion is that applying it preserves behavior."""

	MACHINE_APPLICABLE = auto()
	MAYBE_INCORRECT = auto()
	HAS_PLACEHOLDERS = auto()
	UNSPECIFIED = auto()


@dataclass(frozen=True)
class Suggestion:
	"""Replacement text proposed for `span`."""

	message: str
	replacement: str
	span: Span = field(default_factory=Span)
	applicability: Applicability = Applicability.UNSPECIFIED


@dataclass
class Diagnostic:
	"""Represents a diagnostic (error/warning/etc.)."""

	message: str
	code: str | None = None
	# Optional phase label ("parser", "typecheck", "lint").
	#
	# The CLI also passes a default phase when rendering, but front-end stages
	# that share a sink set it explicitly so JSON output stays unambiguous.
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Source location (Span() denotes unknown).
	notes: list[str] = field(default_factory=list)
	suggestions: list[Suggestion] = field(default_factory=list)

	def __post_init__(self) -> None:
		# Normalize missing spans to the sentinel Span() so downstream tooling
		# can rely on a structured object instead of None.
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()


def has_errors(diagnostics: list[Diagnostic]) -> bool:
	return any(d.severity == "error" for d in diagnostics)


__all__ = ["Applicability", "Diagnostic", "Suggestion", "has_errors"]
