# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lint declarations and per-run lint levels.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Tuple

from etalint.core.diagnostics import Applicability


class Level(Enum):
	ALLOW = "allow"
	WARN = "warn"
	DENY = "deny"

	@property
	def severity(self) -> str:
		"""Diagnostic severity for findings reported at this level."""
		return "error" if self is Level.DENY else "warning"


@dataclass(frozen=True)
class LintDef:
	"""Static description of one lint."""

	name: str
	group: str
	default_level: Level
	description: str
	message: str
	suggestion: str
	applicability: Applicability = Applicability.MACHINE_APPLICABLE


REDUNDANT_CLOSURE = LintDef(
	name="redundant_closure",
	group="style",
	default_level=Level.WARN,
	description="redundant closures, i.e. `|a| foo(a)` (which can be written as just `foo`)",
	message="redundant closure found",
	suggestion="remove closure as shown",
)

ALL_LINTS: Tuple[LintDef, ...] = (REDUNDANT_CLOSURE,)


def normalize_lint_name(name: str) -> str:
	"""`redundant-closure` and `redundant_closure` name the same lint."""
	return name.strip().replace("-", "_")


@dataclass
class LintConfig:
	"""
	Effective lint levels for a run.

	Overrides are applied in order, so the last one naming a lint wins. An
	override may name a lint or a whole group (`style`).
	"""

	lints: Tuple[LintDef, ...] = ALL_LINTS
	_levels: Dict[str, Level] = field(default_factory=dict, init=False, repr=False)

	def __post_init__(self) -> None:
		for lint in self.lints:
			self._levels.setdefault(lint.name, lint.default_level)

	def set_level(self, name: str, level: Level) -> None:
		key = normalize_lint_name(name)
		matched = [lint for lint in self.lints if key in (lint.name, lint.group)]
		if not matched:
			raise ValueError(f"unknown lint: `{name}`")
		for lint in matched:
			self._levels[lint.name] = level

	def apply(self, overrides: Iterable[Tuple[str, Level]]) -> "LintConfig":
		for name, level in overrides:
			self.set_level(name, level)
		return self

	def level(self, lint: LintDef) -> Level:
		return self._levels.get(lint.name, lint.default_level)

	def is_enabled(self, lint: LintDef) -> bool:
		return self.level(lint) is not Level.ALLOW


__all__ = [
	"ALL_LINTS",
	"Level",
	"LintConfig",
	"LintDef",
	"REDUNDANT_CLOSURE",
	"normalize_lint_name",
]
