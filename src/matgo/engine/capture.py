from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Sequence

from .state import Collected
from .types import Card

EventKind = Literal["plain", "chok", "jjok", "ppeok", "double_chok"]


@dataclass(frozen=True)
class CaptureResult:
    new_floor: tuple[Card, ...]
    captured: tuple[Card, ...]
    event: EventKind
    steal: bool = False


def _same_month(cards: Sequence[Card], month: int) -> list[Card]:
    return [c for c in cards if c.month == month]


def _without_month(cards: Sequence[Card], month: int) -> list[Card]:
    return [c for c in cards if c.month != month]


def resolve_play(played: Card, floor: Sequence[Card], drawn: Card) -> CaptureResult:
    """Resolve one turn: the played card against the floor, then the drawn card.

    Pure function. The caller applies ``captured`` to the acting player and,
    when ``steal`` is set, takes one junk card from the other player.
    """
    hand_matches = _same_month(floor, played.month)
    drawn_same_month = drawn.month == played.month

    # Ppeok: the drawn card lands on a single match; nobody takes anything.
    if len(hand_matches) == 1 and drawn_same_month:
        return CaptureResult(
            new_floor=tuple(floor) + (played, drawn),
            captured=(),
            event="ppeok",
        )

    # Jjok: laid on an empty month, the drawn card pairs with it at once.
    if not hand_matches and drawn_same_month:
        return CaptureResult(
            new_floor=tuple(floor),
            captured=(played, drawn),
            event="jjok",
            steal=True,
        )

    event: EventKind | None = None
    steal = False
    captured: list[Card] = []
    new_floor = list(floor)

    if hand_matches:
        if len(hand_matches) == 2:
            event = "double_chok"
            steal = True
        else:
            event = "chok"
        captured.append(played)
        captured.extend(hand_matches)
        new_floor = _without_month(new_floor, played.month)
    else:
        new_floor.append(played)

    flip_matches = _same_month(new_floor, drawn.month)
    if flip_matches:
        if event is None:
            event = "chok"
        captured.append(drawn)
        captured.extend(flip_matches)
        new_floor = _without_month(new_floor, drawn.month)
    else:
        new_floor.append(drawn)

    return CaptureResult(
        new_floor=tuple(new_floor),
        captured=tuple(captured),
        event=event or "plain",
        steal=steal,
    )


def steal_junk(victim: Collected, thief: Collected) -> Card | None:
    """Move one junk card from ``victim`` to ``thief``.

    Single junk is taken before double junk. Returns the stolen card, or
    None when the victim has no junk.
    """
    if not victim.junk:
        return None
    idx = next((i for i, c in enumerate(victim.junk) if not c.double_junk), 0)
    card = victim.junk.pop(idx)
    thief.junk.append(card)
    return card
