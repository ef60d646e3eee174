# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import json
from pathlib import Path

import pytest

from etalint.etalint import main as etalint_main

FIXTURE = """
fn id(x: i32) -> i32;
fn apply(f: fn(i32) -> i32);

fn main() {
	apply(|x| id(x));
}
"""


def _write_file(path: Path, text: str) -> Path:
	path.parent.mkdir(parents=True, exist_ok=True)
	path.write_text(text, encoding="utf-8")
	return path


def _run_json(argv: list[str], capsys: pytest.CaptureFixture[str]) -> tuple[int, dict]:
	rc = etalint_main([*argv, "--json"])
	out = capsys.readouterr().out
	payload = json.loads(out) if out.strip() else {}
	return rc, payload


def test_warning_exits_zero_and_reports_suggestion(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write_file(tmp_path / "main.rs", FIXTURE)
	rc, payload = _run_json([str(src)], capsys)
	assert rc == 0
	assert payload["exit_code"] == 0
	(diag,) = payload["diagnostics"]
	assert diag["code"] == "redundant_closure"
	assert diag["phase"] == "lint"
	assert diag["severity"] == "warning"
	assert diag["file"] == str(src)
	assert diag["line"] == 6
	assert diag["suggestions"][0]["replacement"] == "id"
	assert diag["suggestions"][0]["applicability"] == "MACHINE_APPLICABLE"


def test_deny_exits_one(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write_file(tmp_path / "main.rs", FIXTURE)
	rc, payload = _run_json([str(src), "-D", "redundant_closure"], capsys)
	assert rc == 1
	assert payload["diagnostics"][0]["severity"] == "error"


def test_last_level_flag_wins(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write_file(tmp_path / "main.rs", FIXTURE)
	rc, payload = _run_json([str(src), "-D", "redundant_closure", "-A", "style"], capsys)
	assert rc == 0
	assert payload["diagnostics"] == []


def test_human_output_goes_to_stderr(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write_file(tmp_path / "main.rs", FIXTURE)
	rc = etalint_main([str(src)])
	captured = capsys.readouterr()
	assert rc == 0
	assert captured.out == ""
	assert f"{src}:6:8: warning[redundant_closure]: redundant closure found" in captured.err
	assert "= help: remove closure as shown: `id`" in captured.err


def test_parse_error_exits_one(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write_file(tmp_path / "bad.rs", "fn main( {")
	rc, payload = _run_json([str(src)], capsys)
	assert rc == 1
	assert payload["diagnostics"][0]["phase"] == "parser"


def test_missing_file_is_reported(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	rc, payload = _run_json([str(tmp_path / "nope.rs")], capsys)
	assert rc == 1
	assert payload["diagnostics"][0]["phase"] == "io"


def test_undecodable_file_is_reported(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = tmp_path / "latin1.rs"
	src.write_bytes(b"fn main() { \xff }\n")
	rc, payload = _run_json([str(src)], capsys)
	assert rc == 1
	(diag,) = payload["diagnostics"]
	assert diag["phase"] == "io"
	assert diag["file"] == str(src)
	assert "utf-8" in diag["message"]


def test_unreadable_file_does_not_stop_other_files(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	bad = tmp_path / "bad.rs"
	bad.write_bytes(b"\xfe\xff")
	good = _write_file(tmp_path / "main.rs", FIXTURE)
	rc, payload = _run_json([str(bad), str(good)], capsys)
	assert rc == 1
	assert [d["phase"] for d in payload["diagnostics"]] == ["io", "lint"]


def test_unknown_lint_name_is_a_usage_error(tmp_path: Path) -> None:
	src = _write_file(tmp_path / "main.rs", FIXTURE)
	with pytest.raises(SystemExit) as exc:
		etalint_main([str(src), "-W", "no_such_lint"])
	assert exc.value.code == 2
