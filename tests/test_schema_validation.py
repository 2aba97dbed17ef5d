from __future__ import annotations

import json
import shutil
from collections import Counter
from pathlib import Path

import pytest

from matgo.paths import get_paths
from matgo.services.content import ContentError, ContentService


def test_content_schemas_validate() -> None:
    paths = get_paths()
    content = ContentService(paths.data_dir, paths.schema_dir)
    content.validate_all()


def test_catalog_has_four_cards_per_month() -> None:
    paths = get_paths()
    cards = ContentService(paths.data_dir, paths.schema_dir).load_cards_db()
    assert list(cards.all_ids()) == list(range(1, 49))
    assert Counter(c.month for c in cards.all_cards()) == {m: 4 for m in range(1, 13)}
    assert [c.id for c in cards.all_cards() if c.seasonal_animal] == [5, 13, 30]
    assert [c.id for c in cards.all_cards() if c.special_animal] == [33]
    assert [c.id for c in cards.all_cards() if c.is_rain_bright] == [45]


def test_roster_has_fifteen_opponents() -> None:
    paths = get_paths()
    roster = ContentService(paths.data_dir, paths.schema_dir).load_opponents()
    assert len(roster) == 15
    assert len({p.id for p in roster}) == 15
    assert all(not p.is_human for p in roster)


def _copy_data(tmp_path: Path) -> Path:
    paths = get_paths()
    data_dir = tmp_path / "data"
    shutil.copytree(paths.data_dir, data_dir)
    return data_dir


def test_card_with_bad_month_is_rejected(tmp_path: Path) -> None:
    data_dir = _copy_data(tmp_path)
    cards_path = data_dir / "cards.json"
    raw = json.loads(cards_path.read_text(encoding="utf-8"))
    raw["cards"][0]["month"] = 2
    cards_path.write_text(json.dumps(raw), encoding="utf-8")

    content = ContentService(data_dir, data_dir / "schemas")
    with pytest.raises(ContentError):
        content.load_cards_db()


def test_card_with_unknown_field_fails_schema(tmp_path: Path) -> None:
    data_dir = _copy_data(tmp_path)
    cards_path = data_dir / "cards.json"
    raw = json.loads(cards_path.read_text(encoding="utf-8"))
    raw["cards"][3]["points"] = 10
    cards_path.write_text(json.dumps(raw), encoding="utf-8")

    content = ContentService(data_dir, data_dir / "schemas")
    with pytest.raises(ContentError, match="Schema validation failed"):
        content.load_cards_db()


def test_missing_roster_file_is_reported(tmp_path: Path) -> None:
    data_dir = _copy_data(tmp_path)
    (data_dir / "opponents.json").unlink()
    content = ContentService(data_dir, data_dir / "schemas")
    with pytest.raises(ContentError, match="Missing content file"):
        content.load_opponents()
