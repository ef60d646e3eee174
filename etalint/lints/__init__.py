# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
etalint.lints: lint declarations, the eta-reduction pass and the driver.
"""

from .driver import run_lints
from .eta_reduction import EtaPass, check_closure
from .findings import Finding, FindingKind, finding_to_diagnostic
from .lint_defs import ALL_LINTS, Level, LintConfig, LintDef, REDUNDANT_CLOSURE

__all__ = [
	"ALL_LINTS",
	"EtaPass",
	"Finding",
	"FindingKind",
	"Level",
	"LintConfig",
	"LintDef",
	"REDUNDANT_CLOSURE",
	"check_closure",
	"finding_to_diagnostic",
	"run_lints",
]
