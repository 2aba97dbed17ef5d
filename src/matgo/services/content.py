from __future__ import annotations

import json
from collections import Counter
from pathlib import Path
from typing import Mapping

from jsonschema import Draft202012Validator

from matgo.engine.tournament import Participant
from matgo.engine.types import CARDS_PER_MONTH, DECK_SIZE, RAIN_MONTH, Card, CardCatalog


class ContentError(RuntimeError):
    pass


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ContentError(f"Missing content file: {path}") from e
    except json.JSONDecodeError as e:
        raise ContentError(f"Invalid JSON in {path}: {e}") from e


def validate_json(instance: object, schema: object, *, context: str) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: [str(p) for p in e.path])
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise ContentError("\n".join(lines))


def _require_str(obj: Mapping[str, object], key: str) -> str:
    v = obj.get(key)
    if not isinstance(v, str):
        raise ContentError(f"Expected string for {key}")
    return v


def _require_int(obj: Mapping[str, object], key: str) -> int:
    v = obj.get(key)
    if not isinstance(v, int):
        raise ContentError(f"Expected int for {key}")
    return v


def _require_list(obj: Mapping[str, object], key: str) -> list[object]:
    v = obj.get(key)
    if not isinstance(v, list):
        raise ContentError(f"Expected list for {key}")
    return v


def _parse_card(item: Mapping[str, object]) -> Card:
    return Card(
        id=_require_int(item, "id"),
        month=_require_int(item, "month"),
        category=_require_str(item, "category"),  # type: ignore[arg-type]
        name=_require_str(item, "name"),
        double_junk=bool(item.get("double_junk", False)),
        seasonal_animal=bool(item.get("seasonal_animal", False)),
        special_animal=bool(item.get("special_animal", False)),
        ribbon_color=item.get("ribbon_color"),  # type: ignore[arg-type]
    )


def _check_catalog(cards: dict[int, Card]) -> None:
    if len(cards) != DECK_SIZE:
        raise ContentError(f"Catalog must hold {DECK_SIZE} distinct cards, got {len(cards)}")
    per_month = Counter(c.month for c in cards.values())
    bad = sorted(m for m in range(1, 13) if per_month.get(m, 0) != CARDS_PER_MONTH)
    if bad:
        raise ContentError(f"Each month needs {CARDS_PER_MONTH} cards; wrong counts for {bad}")
    for c in cards.values():
        if c.category == "ribbon" and c.ribbon_color is None and c.month != RAIN_MONTH:
            raise ContentError(f"Ribbon card {c.id} has no colour")
        if c.category != "ribbon" and c.ribbon_color is not None:
            raise ContentError(f"Card {c.id} is not a ribbon but has a colour")
        if c.seasonal_animal and c.category != "animal":
            raise ContentError(f"Card {c.id} is a seasonal animal but not an animal")


class ContentService:
    def __init__(self, data_dir: Path, schema_dir: Path) -> None:
        self._data_dir = data_dir
        self._schema_dir = schema_dir

    def load_schema(self, name: str) -> object:
        return _load_json(self._schema_dir / name)

    def load_cards_db(self) -> CardCatalog:
        cards_path = self._data_dir / "cards.json"
        raw = _load_json(cards_path)
        validate_json(raw, self.load_schema("cards.schema.json"), context=str(cards_path))

        if not isinstance(raw, dict):
            raise ContentError("cards.json must be an object")
        if _require_int(raw, "rain_month") != RAIN_MONTH:
            raise ContentError(f"cards.json rain_month must be {RAIN_MONTH}")

        cards: dict[int, Card] = {}
        for item in _require_list(raw, "cards"):
            if not isinstance(item, dict):
                continue
            card = _parse_card(item)
            if card.id in cards:
                raise ContentError(f"Duplicate card id {card.id}")
            cards[card.id] = card
        _check_catalog(cards)
        return CardCatalog(cards=cards)

    def load_opponents(self) -> tuple[Participant, ...]:
        path = self._data_dir / "opponents.json"
        raw = _load_json(path)
        validate_json(raw, self.load_schema("opponents.schema.json"), context=str(path))
        if not isinstance(raw, dict):
            raise ContentError("opponents.json must be an object")

        out: list[Participant] = []
        seen: set[str] = set()
        for item in _require_list(raw, "opponents"):
            if not isinstance(item, dict):
                continue
            oid = _require_str(item, "id")
            if oid in seen:
                raise ContentError(f"Duplicate opponent id {oid}")
            seen.add(oid)
            desc = item.get("description", "")
            out.append(
                Participant(
                    id=oid,
                    name=_require_str(item, "name"),
                    title=_require_str(item, "title"),
                    description=desc if isinstance(desc, str) else "",
                )
            )
        return tuple(out)

    def validate_all(self) -> None:
        # Load is validation (schema + parse)
        _ = self.load_cards_db()
        _ = self.load_opponents()
        _ = self.load_schema("savegame.schema.json")
