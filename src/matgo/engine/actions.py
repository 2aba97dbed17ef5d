from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

GoStopDecision = Literal["go", "stop"]


@dataclass(frozen=True)
class PlayCardAction:
    player: int
    card_id: int


@dataclass(frozen=True)
class GoAction:
    player: int


@dataclass(frozen=True)
class StopAction:
    player: int


Action = PlayCardAction | GoAction | StopAction


def decision_to_action(player: int, decision: GoStopDecision) -> Action:
    if decision == "go":
        return GoAction(player=player)
    return StopAction(player=player)
