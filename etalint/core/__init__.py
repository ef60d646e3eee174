"""
etalint.core: shared span/diagnostic/type primitives used across stages.

Modules:
  - span: Span source locations
  - diagnostics: Diagnostic records and fix-it Suggestions
  - types_core: TypeDesc immutable type descriptions
  - types_protocol: TypeQuery protocol consumed by lints
"""

__all__ = [
    "span",
    "diagnostics",
    "types_core",
    "types_protocol",
]
