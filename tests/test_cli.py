from __future__ import annotations

import json
from pathlib import Path

import pytest

from gemlock.cli import main


def test_check_ok(data_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rc = main(["check", str(data_dir / "Rails.Gemfile.lock")])

    assert rc == 0
    out = capsys.readouterr().out
    assert out.startswith("[CHECK OK]")
    assert "sources=1 specs=27 platforms=1 dependencies=1" in out


def test_check_reports_syntax_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    bad = tmp_path / "Gemfile.lock"
    bad.write_text("FOO\n", encoding="utf-8")

    rc = main(["check", str(bad)])

    assert rc == 2
    err = capsys.readouterr().err
    assert "[SYNTAX ERROR]" in err
    assert "Parse error at 1:1" in err


def test_missing_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rc = main(["check", str(tmp_path / "nope.lock")])

    assert rc == 2
    assert "FileNotFoundError" in capsys.readouterr().err


def test_dump_json(data_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rc = main(["dump", str(data_dir / "Git.Gemfile.lock"), "--indent", "0"])

    assert rc == 0
    data = json.loads(capsys.readouterr().out)
    assert [s["kind"] for s in data["sources"]] == ["GIT", "PATH", "GEM"]
    assert data["dependencies"][-1] == {"name": "rake", "version": "(~> 13.0)"}


def test_tree(data_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rc = main(["tree", str(data_dir / "Rails.Gemfile.lock")])

    assert rc == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].startswith("Gemfile [0:")
    assert lines[1].startswith("  Gem [0:")
    assert any(line.strip().startswith("GemName") and "'actionmailer'" in line for line in lines)


def test_tree_offsets_skip_bom(data_dir: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    lock = tmp_path / "Gemfile.lock"
    lock.write_bytes(b"\xef\xbb\xbf" + (data_dir / "Git.Gemfile.lock").read_bytes())

    rc = main(["tree", str(lock)])

    assert rc == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[1].startswith("  Git [0:")
    assert lines[1].endswith("'GIT ...'")


def test_tree_reports_syntax_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    bad = tmp_path / "Gemfile.lock"
    bad.write_text("PLATFORMS\n  ruby\n", encoding="utf-8")

    rc = main(["tree", str(bad)])

    assert rc == 2
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "[SYNTAX ERROR]" in captured.err
    assert "Parse error at 3:1" in captured.err
