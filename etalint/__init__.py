# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
etalint: redundant closure (eta reduction) lint over a small typed IR.
"""

__version__ = "0.1.0"
