from __future__ import annotations

from typing import Protocol

from .actions import GoStopDecision, PlayCardAction, decision_to_action
from .rules import StepResult, legal_moves, step
from .state import Collected, PlayerState, RoundState
from .types import Card

GO_BAK_PRESSURE_SCORE = 10
MAX_GO_COUNT = 2
LOW_DECK_SIZE = 8
GREEDY_GO_SCORE = 9


class Policy(Protocol):
    """Decision maker for one seat. The engine trusts whatever it returns."""

    def choose_move(self, state: RoundState, player: int) -> Card: ...

    def choose_go_or_stop(self, state: RoundState, player: int) -> GoStopDecision: ...


def card_value(card: Card) -> float:
    if card.category == "bright":
        return 5.0
    if card.category == "animal":
        return 4.0 if card.seasonal_animal or card.special_animal else 3.0
    if card.category == "ribbon":
        return 2.0
    return 1.5 if card.double_junk else 1.0


def _birds(collected: Collected) -> int:
    return sum(1 for c in collected.animal if c.seasonal_animal)


def _red_ribbons(collected: Collected) -> int:
    return sum(1 for c in collected.ribbon if c.ribbon_color == "red")


def _is_red_ribbon(card: Card) -> bool:
    return card.category == "ribbon" and card.ribbon_color == "red"


def _capture_value(hand_card: Card, floor_match: Card, me: PlayerState, other: PlayerState) -> float:
    v = card_value(hand_card) + card_value(floor_match)

    # Finishing our own sets
    if _birds(me.collected) == 2:
        if hand_card.seasonal_animal:
            v += 20
        if floor_match.seasonal_animal:
            v += 20
    if _red_ribbons(me.collected) == 2:
        if _is_red_ribbon(hand_card):
            v += 15
        if _is_red_ribbon(floor_match):
            v += 15

    # Denying the other player's sets
    if _is_red_ribbon(floor_match) and _red_ribbons(other.collected) == 2:
        v += 10
    if floor_match.seasonal_animal and _birds(other.collected) == 2:
        v += 18
    return v


def _discard_cost(card: Card, other: PlayerState) -> float:
    v = card_value(card)
    oc = other.collected
    if any(c.month == card.month for c in oc.junk + oc.ribbon + oc.animal):
        v += 5
    return v


def choose_move(state: RoundState, player: int) -> Card:
    me = state.players[player]
    other = state.players[state.opponent(player)]
    if not me.hand:
        raise ValueError("No cards to play.")

    floor_months = {c.month for c in state.floor}
    matching = [c for c in me.hand if c.month in floor_months]

    if matching:
        best: tuple[float, Card] | None = None
        for hand_card in matching:
            floor_match = next(c for c in state.floor if c.month == hand_card.month)
            v = _capture_value(hand_card, floor_match, me, other)
            if best is None or v > best[0]:
                best = (v, hand_card)
        assert best is not None
        return best[1]

    worst: tuple[float, Card] | None = None
    for hand_card in me.hand:
        v = _discard_cost(hand_card, other)
        if worst is None or v < worst[0]:
            worst = (v, hand_card)
    assert worst is not None
    return worst[1]


def decide_go_or_stop(actor: PlayerState, other: PlayerState, deck_size: int) -> GoStopDecision:
    # Press harder when a go-bak is already on the other player
    if other.is_go_bak and actor.score < GO_BAK_PRESSURE_SCORE:
        return "go"
    if actor.score >= GO_BAK_PRESSURE_SCORE:
        return "stop"
    if actor.go_count >= MAX_GO_COUNT:
        return "stop"
    if deck_size < LOW_DECK_SIZE:
        return "stop"
    # Lock in a bright-bak while it is available
    if len(actor.collected.bright) >= 3 and not other.collected.bright:
        return "stop"
    if actor.score < GREEDY_GO_SCORE:
        return "go"
    return "stop"


class HeuristicPolicy:
    """Greedy capture heuristic with the go/stop rules above."""

    def choose_move(self, state: RoundState, player: int) -> Card:
        return choose_move(state, player)

    def choose_go_or_stop(self, state: RoundState, player: int) -> GoStopDecision:
        actor = state.players[player]
        other = state.players[state.opponent(player)]
        return decide_go_or_stop(actor, other, len(state.deck))


def ai_take_turn(state: RoundState, player: int, policy: Policy | None = None) -> StepResult | None:
    """Let ``policy`` make the one decision ``player`` owes right now.

    Returns None when it is not ``player``'s move.
    """
    policy = policy or HeuristicPolicy()
    if state.current_player != player or state.pending is not None:
        return None
    if state.phase == "playing":
        card = policy.choose_move(state, player)
        return step(state, PlayCardAction(player=player, card_id=card.id))
    if state.phase == "go_or_stop":
        decision = policy.choose_go_or_stop(state, player)
        return step(state, decision_to_action(player, decision))
    return None
