"""Score calculation for a player's collected cards.

Everything here is a pure function of bucket contents: calling it twice, or
on the same cards in another order, gives the same result.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .state import AchievedSet, Collected
from .types import RIBBON_COLORS, Card

WINNING_SCORE = 7

JUNK_THRESHOLD = 10
ANIMAL_THRESHOLD = 5
RIBBON_THRESHOLD = 5
SPECIAL_ANIMAL_JUNK_BONUS = 2


@dataclass(frozen=True)
class ScoreResult:
    total: int
    sets: tuple[AchievedSet, ...]


def _ids(cards: Sequence[Card]) -> tuple[int, ...]:
    return tuple(sorted(c.id for c in cards))


def bright_points(brights: Sequence[Card]) -> int:
    n = len(brights)
    if n >= 5:
        return 15
    if n == 4:
        return 4
    if n == 3:
        return 2 if any(c.is_rain_bright for c in brights) else 3
    return 0


def effective_junk_count(collected: Collected) -> int:
    count = sum(2 if c.double_junk else 1 for c in collected.junk)
    if any(c.special_animal for c in collected.animal):
        count += SPECIAL_ANIMAL_JUNK_BONUS
    return count


def _bright_set(brights: Sequence[Card]) -> AchievedSet | None:
    n = len(brights)
    if n >= 5:
        name = "five_brights"
    elif n == 4:
        name = "four_brights"
    elif n == 3:
        name = "rain_three_brights" if any(c.is_rain_bright for c in brights) else "three_brights"
    else:
        return None
    return AchievedSet(name=name, card_ids=_ids(brights))


def score_collected(collected: Collected) -> ScoreResult:
    total = 0
    sets: list[AchievedSet] = []

    # Brights
    total += bright_points(collected.bright)
    bright_set = _bright_set(collected.bright)
    if bright_set is not None:
        sets.append(bright_set)

    # Animals
    birds = [c for c in collected.animal if c.seasonal_animal]
    if len(birds) == 3:
        total += 5
        sets.append(AchievedSet(name="bird_set", card_ids=_ids(birds)))
    if len(collected.animal) >= ANIMAL_THRESHOLD:
        total += len(collected.animal) - (ANIMAL_THRESHOLD - 1)

    # Ribbons
    for color in RIBBON_COLORS:
        same = [c for c in collected.ribbon if c.ribbon_color == color]
        if len(same) == 3:
            total += 3
            sets.append(AchievedSet(name=f"{color}_ribbons", card_ids=_ids(same)))
    if len(collected.ribbon) >= RIBBON_THRESHOLD:
        total += len(collected.ribbon) - (RIBBON_THRESHOLD - 1)

    # Junk
    junk = effective_junk_count(collected)
    if junk >= JUNK_THRESHOLD:
        total += junk - (JUNK_THRESHOLD - 1)

    return ScoreResult(total=total, sets=tuple(sets))
