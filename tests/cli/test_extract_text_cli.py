from __future__ import annotations

import json
from pathlib import Path

import pytest

from quizforge.cli.extract_text import main as extract_text_main


def test_extract_text_cli_prints_json_payload(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "lecture.md"
    source.write_text("# Mitosis\n\nCell division in four phases.", encoding="utf-8")

    code = extract_text_main(["--path", str(source)])

    captured = capsys.readouterr()
    payload = json.loads(captured.out)
    assert code == 0
    assert payload["media_type"] == "text/markdown"
    assert payload["text"] == "# Mitosis\n\nCell division in four phases."
    assert payload["char_count"] == len(payload["text"])
    assert "Preparing file..." in captured.err


def test_extract_text_cli_quiet_suppresses_progress(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "notes.txt"
    source.write_text("plain notes", encoding="utf-8")

    code = extract_text_main(["--path", str(source), "--quiet"])

    captured = capsys.readouterr()
    assert code == 0
    assert "Preparing file..." not in captured.err


def test_extract_text_cli_reports_unsupported_format(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "archive.zip"
    source.write_bytes(b"PK\x03\x04")

    code = extract_text_main(["--path", str(source), "--quiet"])

    payload = json.loads(capsys.readouterr().out)
    assert code == 1
    assert "Unsupported file type" in payload["error"]


def test_extract_text_cli_reports_missing_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = extract_text_main(["--path", str(tmp_path / "missing.pdf"), "--quiet"])

    payload = json.loads(capsys.readouterr().out)
    assert code == 1
    assert "Failed to read source file" in payload["error"]


def test_extract_text_cli_rejects_bad_configuration(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setenv("QUIZFORGE_RENDER_DPI", "10")
    source = tmp_path / "notes.txt"
    source.write_text("notes", encoding="utf-8")

    code = extract_text_main(["--path", str(source)])

    assert code == 2
    assert "QUIZFORGE_RENDER_DPI" in capsys.readouterr().err
