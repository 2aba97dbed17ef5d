from __future__ import annotations

import sys
from dataclasses import replace
from pathlib import Path

import pytest

import matgo.cli.main as cli
from matgo.paths import get_paths


def _run(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, *argv: str) -> int:
    paths = replace(get_paths(), userdata_dir=tmp_path)
    monkeypatch.setattr(cli, "get_paths", lambda: paths)
    monkeypatch.setattr(sys, "argv", ["matgo", *argv])
    return cli.main()


def test_full_autoplay_run(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(monkeypatch, tmp_path, "--seed", "12", "--fresh") == 0
    out = capsys.readouterr().out
    assert "Round of 16: vs" in out
    assert "Tournament complete" in out or "Eliminated" in out
    assert not (tmp_path / "savegame.json").exists()
    assert (tmp_path / "telemetry.jsonl").exists()


def test_paused_run_resumes(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(monkeypatch, tmp_path, "--seed", "12", "--max-steps", "30") == 0
    assert "Paused" in capsys.readouterr().out
    assert (tmp_path / "savegame.json").exists()

    assert _run(monkeypatch, tmp_path, "--max-steps", "5") == 0
    assert "Resuming Round of 16 (seed 12)" in capsys.readouterr().out


def test_bad_rate_is_a_usage_error(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as exc:
        _run(monkeypatch, tmp_path, "--rate", "0")
    assert exc.value.code == 2
