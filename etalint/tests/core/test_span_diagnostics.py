# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from etalint.core.diagnostics import Diagnostic, has_errors
from etalint.core.span import Span
from etalint.parser.ast import Located


def test_span_from_located_copies_offsets():
	span = Span.from_loc(Located(line=2, column=5, end_line=2, end_column=9, start_pos=10, end_pos=14))
	assert span.is_known()
	assert span.has_offsets()
	assert (span.start_pos, span.end_pos) == (10, 14)
	assert Span.from_loc(span) is span
	assert Span.from_loc(None) == Span()


def test_span_external_macro_and_file():
	span = Span(line=1, column=1).with_file("a.rs").in_external_macro()
	assert span.file == "a.rs"
	assert span.from_external_macro


def test_sort_key_puts_unknown_last():
	known = Span(file="a", line=3, column=1)
	unknown = Span(file="a")
	assert sorted([unknown, known], key=Span.sort_key) == [known, unknown]


def test_diagnostic_normalizes_missing_span():
	d = Diagnostic(message="boom", span=None)  # type: ignore[arg-type]
	assert d.span == Span()
	assert has_errors([d])
	assert not has_errors([Diagnostic(message="meh", severity="warning")])
