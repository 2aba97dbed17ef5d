from __future__ import annotations

import random
from collections import Counter
from dataclasses import dataclass
from typing import Sequence

from .types import CARDS_PER_MONTH, DECK_SIZE, Card, CardCatalog

HAND_SIZE = 10
FLOOR_SIZE = 8


@dataclass(frozen=True)
class Deal:
    hand0: list[Card]
    hand1: list[Card]
    floor: list[Card]
    deck: list[Card]
    void_deals: int = 0


def shuffle_deck(catalog: CardCatalog, rng: random.Random) -> list[Card]:
    cards = catalog.all_cards()
    if len(cards) != DECK_SIZE:
        raise ValueError(f"Catalog must hold exactly {DECK_SIZE} cards.")
    rng.shuffle(cards)
    return cards


def deal_round(deck: Sequence[Card]) -> tuple[list[Card], list[Card], list[Card], list[Card]]:
    """Split a shuffled deck into (hand0, hand1, floor, remaining)."""
    if len(deck) != DECK_SIZE:
        raise ValueError(f"Deck must be exactly {DECK_SIZE} cards.")
    cards = list(deck)
    hand0 = cards[:HAND_SIZE]
    hand1 = cards[HAND_SIZE : 2 * HAND_SIZE]
    floor = cards[2 * HAND_SIZE : 2 * HAND_SIZE + FLOOR_SIZE]
    remaining = cards[2 * HAND_SIZE + FLOOR_SIZE :]
    return hand0, hand1, floor, remaining


def is_nagari(floor: Sequence[Card]) -> bool:
    counts = Counter(c.month for c in floor)
    return any(n == CARDS_PER_MONTH for n in counts.values())


def deal_fresh_round(catalog: CardCatalog, rng: random.Random) -> Deal:
    """Shuffle and deal until the floor is playable.

    A nagari floor voids the deal; there is no upper bound on retries.
    """
    void_deals = 0
    while True:
        hand0, hand1, floor, remaining = deal_round(shuffle_deck(catalog, rng))
        if not is_nagari(floor):
            return Deal(hand0=hand0, hand1=hand1, floor=floor, deck=remaining, void_deals=void_deals)
        void_deals += 1
