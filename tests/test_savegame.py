from __future__ import annotations

import json
from pathlib import Path

from matgo.engine.ai import HeuristicPolicy
from matgo.engine.driver import autoplay
from matgo.engine.serialize import snapshot
from matgo.engine.tournament import TournamentConfig, new_tournament
from matgo.paths import get_paths
from matgo.services.content import ContentService
from matgo.services.savegame import SaveGameService
from matgo.services.telemetry import TelemetryService


def _services(tmp_path: Path) -> tuple[ContentService, SaveGameService, TelemetryService]:
    paths = get_paths()
    content = ContentService(paths.data_dir, paths.schema_dir)
    telemetry = TelemetryService(tmp_path / "telemetry.jsonl")
    saves = SaveGameService(tmp_path / "save.json", content, telemetry)
    return content, saves, telemetry


def test_save_and_resume(tmp_path: Path) -> None:
    content, saves, _ = _services(tmp_path)
    cards = content.load_cards_db()
    state = new_tournament(cards, content.load_opponents(), seed=3, config=TournamentConfig(200))
    autoplay(state, [HeuristicPolicy(), HeuristicPolicy()], max_steps=60)
    assert saves.save(state)
    assert saves.exists()

    loaded = saves.load(cards)
    assert loaded is not None
    assert snapshot(loaded) == snapshot(state)
    assert loaded.config.points_to_capital_rate == 200


def test_intro_state_is_not_saved(tmp_path: Path) -> None:
    content, saves, _ = _services(tmp_path)
    state = new_tournament(content.load_cards_db(), content.load_opponents(), seed=3)
    assert not saves.save(state)
    assert not saves.exists()


def test_finished_tournament_clears_the_save(tmp_path: Path) -> None:
    content, saves, telemetry = _services(tmp_path)
    state = new_tournament(content.load_cards_db(), content.load_opponents(), seed=3)
    autoplay(state, [HeuristicPolicy(), HeuristicPolicy()], max_steps=10)
    assert saves.save(state)
    state.phase = "game_over"
    assert not saves.save(state)
    assert not saves.exists()
    assert [r["type"] for r in telemetry.read()] == ["save_cleared"]


def test_malformed_save_falls_back_to_none(tmp_path: Path) -> None:
    content, saves, telemetry = _services(tmp_path)
    cards = content.load_cards_db()

    saves.path.write_text("{not json", encoding="utf-8")
    assert saves.load(cards) is None

    saves.path.write_text(json.dumps({"version": 1, "phase": "playing"}), encoding="utf-8")
    assert saves.load(cards) is None

    records = telemetry.read()
    assert [r["type"] for r in records] == ["save_rejected", "save_rejected"]


def test_missing_save_is_none(tmp_path: Path) -> None:
    content, saves, telemetry = _services(tmp_path)
    assert saves.load(content.load_cards_db()) is None
    assert telemetry.read() == []


def test_save_with_a_short_bracket_is_rejected(tmp_path: Path) -> None:
    content, saves, telemetry = _services(tmp_path)
    cards = content.load_cards_db()
    state = new_tournament(cards, content.load_opponents(), seed=3)
    autoplay(state, [HeuristicPolicy(), HeuristicPolicy()], max_steps=3)
    data = snapshot(state)
    data["bracket"] = data["bracket"][:1]  # type: ignore[index]
    saves.path.write_text(json.dumps(data), encoding="utf-8")

    assert saves.load(cards) is None
    assert [r["type"] for r in telemetry.read()] == ["save_rejected"]
