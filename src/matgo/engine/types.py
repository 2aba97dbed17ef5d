from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

CardCategory = Literal["bright", "animal", "ribbon", "junk"]
RibbonColor = Literal["red", "blue", "grass"]

CATEGORIES: tuple[CardCategory, ...] = ("bright", "animal", "ribbon", "junk")
RIBBON_COLORS: tuple[RibbonColor, ...] = ("red", "blue", "grass")

RAIN_MONTH = 12
DECK_SIZE = 48
CARDS_PER_MONTH = 4


@dataclass(frozen=True)
class Card:
    id: int
    month: int
    category: CardCategory
    name: str = ""
    double_junk: bool = False
    seasonal_animal: bool = False
    special_animal: bool = False
    ribbon_color: RibbonColor | None = None

    @property
    def is_rain_bright(self) -> bool:
        return self.category == "bright" and self.month == RAIN_MONTH


@dataclass(frozen=True)
class CardCatalog:
    """Immutable 48-card catalog used by the engine."""

    cards: dict[int, Card]

    def get(self, card_id: int) -> Card:
        return self.cards[card_id]

    def all_ids(self) -> Sequence[int]:
        return sorted(self.cards.keys())

    def all_cards(self) -> list[Card]:
        return [self.cards[cid] for cid in self.all_ids()]
