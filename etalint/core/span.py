# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lightweight source span representation used by diagnostics and lints.

A Span carries best-effort file/line/column info plus the byte offsets of the
covered text, so fix-it suggestions can recover the exact source snippet.
`from_external_macro` marks code produced by an external macro expansion;
lints skip such code because the user cannot edit it.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Represents a source span (best-effort file/line/column plus offsets)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None
	start_pos: Optional[int] = None
	end_pos: Optional[int] = None
	from_external_macro: bool = False
	raw: Any = None

	@classmethod
	def from_loc(cls, loc: Any) -> "Span":
		"""
		Construct a Span from an existing parser/location object.

		If `loc` is already a Span, it is returned unchanged; otherwise common
		location attributes (lark `Meta`, parser `Located`) are copied and the
		original object is kept in `raw`.
		"""
		if loc is None:
			return cls()
		if isinstance(loc, cls):
			return loc
		return cls(
			file=getattr(loc, "file", None) or getattr(loc, "filename", None) or None,
			line=getattr(loc, "line", None),
			column=getattr(loc, "column", None),
			end_line=getattr(loc, "end_line", None),
			end_column=getattr(loc, "end_column", None),
			start_pos=getattr(loc, "start_pos", None),
			end_pos=getattr(loc, "end_pos", None),
			raw=loc,
		)

	def is_known(self) -> bool:
		return self.line is not None

	def has_offsets(self) -> bool:
		return self.start_pos is not None and self.end_pos is not None

	def with_file(self, file: str | None) -> "Span":
		return replace(self, file=file)

	def in_external_macro(self) -> "Span":
		"""Return a copy of this span marked as produced by an external macro."""
		return replace(self, from_external_macro=True)

	def sort_key(self) -> tuple:
		"""Deterministic ordering key; unknown locations sort last."""
		return (
			self.file or "",
			self.line if self.line is not None else 1 << 30,
			self.column if self.column is not None else 1 << 30,
		)


__all__ = ["Span"]
