from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Sequence

from .actions import Action, GoAction, PlayCardAction, StopAction
from .capture import resolve_play, steal_junk
from .deck import deal_fresh_round
from .outcome import draw_outcome, stop_outcome
from .scoring import WINNING_SCORE, score_collected
from .state import HUMAN, Event, PendingPlay, PlayerState, RoundState
from .types import Card, CardCatalog

DEFAULT_POINTS_TO_CAPITAL_RATE = 100


@dataclass
class StepResult:
    ok: bool
    events: list[Event]
    error: str | None = None


def _fail(msg: str) -> StepResult:
    return StepResult(ok=False, events=[], error=msg)


def _ids(cards: Sequence[Card]) -> list[int]:
    return [c.id for c in cards]


def new_round(
    players: Sequence[PlayerState],
    catalog: CardCatalog,
    rng: random.Random,
    points_to_capital_rate: int = DEFAULT_POINTS_TO_CAPITAL_RATE,
) -> RoundState:
    """Deal a fresh round between ``players`` (human slot first).

    Capital is kept; everything else on the players is reset.
    """
    if len(players) != 2:
        raise ValueError("A round needs exactly two players.")
    for p in players:
        p.reset_for_round()

    deal = deal_fresh_round(catalog, rng)
    players[0].hand = deal.hand0
    players[1].hand = deal.hand1

    state = RoundState(
        deck=deal.deck,
        floor=deal.floor,
        players=list(players),
        current_player=HUMAN,
        points_to_capital_rate=points_to_capital_rate,
    )
    for _ in range(deal.void_deals):
        state.event_log.append({"type": "NAGARI"})
    state.event_log.append({"type": "ROUND_STARTED", "floor": _ids(state.floor)})
    return state


def legal_moves(state: RoundState, player: int) -> list[Card]:
    """Cards ``player`` may play now.

    When any hand card shares a month with the floor, only those may be played.
    """
    hand = state.players[player].hand
    floor_months = {c.month for c in state.floor}
    matching = [c for c in hand if c.month in floor_months]
    return matching if matching else list(hand)


def recompute_scores(state: RoundState) -> None:
    for p in state.players:
        result = score_collected(p.collected)
        p.score = result.total
        p.achieved_sets = list(result.sets)


def _end_in_draw(state: RoundState, reason: str) -> None:
    state.outcome = draw_outcome()
    state.phase = "round_over"
    state.event_log.append({"type": "ROUND_DRAW", "reason": reason})


def play_phase(state: RoundState, player: int, card_id: int) -> StepResult:
    """First half of a turn: take ``card_id`` from the hand.

    If the draw pile is already empty the round ends as a draw and the card
    stays in the hand.
    """
    if state.phase != "playing":
        return _fail("Round is not in play.")
    if state.pending is not None:
        return _fail("A play is already awaiting resolution.")
    if player != state.current_player:
        return _fail("Not your turn.")
    ps = state.players[player]
    card = ps.find_in_hand(card_id)
    if card is None:
        return _fail("Card is not in hand.")
    if card not in legal_moves(state, player):
        return _fail("Must play a card that matches the floor.")

    start = len(state.event_log)
    if not state.deck:
        _end_in_draw(state, "deck_exhausted")
        return StepResult(ok=True, events=state.event_log[start:])

    ps.hand.remove(card)
    state.pending = PendingPlay(player=player, card=card)
    state.event_log.append({"type": "CARD_PLAYED", "player": player, "card_id": card.id})
    return StepResult(ok=True, events=state.event_log[start:])


def resolve_phase(state: RoundState) -> StepResult:
    """Second half of a turn: flip the top of the deck and settle captures."""
    pending = state.pending
    if pending is None:
        return _fail("No play awaiting resolution.")

    start = len(state.event_log)
    player = pending.player
    ps = state.players[player]
    victim = state.players[state.opponent(player)]

    if not state.deck:
        ps.hand.append(pending.card)
        state.pending = None
        _end_in_draw(state, "deck_exhausted")
        return StepResult(ok=True, events=state.event_log[start:])

    drawn = state.deck.pop(0)
    state.event_log.append({"type": "CARD_FLIPPED", "player": player, "card_id": drawn.id})

    result = resolve_play(pending.card, state.floor, drawn)
    state.floor = list(result.new_floor)
    for card in result.captured:
        ps.collected.add(card)
    state.pending = None
    state.event_log.append(
        {
            "type": "CAPTURE",
            "player": player,
            "event": result.event,
            "captured": _ids(result.captured),
        }
    )

    if result.steal:
        stolen = steal_junk(victim.collected, ps.collected)
        state.event_log.append(
            {
                "type": "JUNK_STOLEN",
                "player": player,
                "card_id": stolen.id if stolen is not None else None,
            }
        )

    recompute_scores(state)

    if ps.score >= WINNING_SCORE:
        state.phase = "go_or_stop"
        state.event_log.append({"type": "GO_OR_STOP", "player": player, "score": ps.score})
    elif not state.deck:
        _end_in_draw(state, "deck_exhausted")
    else:
        _pass_turn(state, player)
    return StepResult(ok=True, events=state.event_log[start:])


def _pass_turn(state: RoundState, player: int) -> None:
    nxt = state.opponent(player)
    if not state.players[nxt].hand:
        _end_in_draw(state, "hand_exhausted")
        return
    state.current_player = nxt
    state.event_log.append({"type": "TURN_PASSED", "player": nxt})


def _check_decision(state: RoundState, player: int) -> StepResult | None:
    if state.phase != "go_or_stop":
        return _fail("No go/stop decision is pending.")
    if player != state.current_player:
        return _fail("Not your decision.")
    return None


def declare_go(state: RoundState, player: int) -> StepResult:
    chk = _check_decision(state, player)
    if chk:
        return chk
    start = len(state.event_log)
    ps = state.players[player]
    other = state.players[state.opponent(player)]
    ps.go_count += 1
    other.is_go_bak = True
    state.event_log.append({"type": "GO", "player": player, "go_count": ps.go_count})

    if not state.deck:
        _end_in_draw(state, "deck_exhausted")
    else:
        state.phase = "playing"
        _pass_turn(state, player)
    return StepResult(ok=True, events=state.event_log[start:])


def declare_stop(state: RoundState, player: int) -> StepResult:
    chk = _check_decision(state, player)
    if chk:
        return chk
    start = len(state.event_log)
    winner = state.players[player]
    loser = state.players[state.opponent(player)]
    outcome = stop_outcome(winner, loser, state.points_to_capital_rate)
    state.outcome = outcome
    state.phase = "round_over"
    assert outcome.breakdown is not None
    state.event_log.append(
        {
            "type": "STOP",
            "player": player,
            "final_score": outcome.breakdown.final_score,
            "capital_change": outcome.capital_change,
        }
    )
    return StepResult(ok=True, events=state.event_log[start:])


def step(state: RoundState, action: Action) -> StepResult:
    """Apply a single action to the round.

    A card play runs both turn phases back to back. Mutates ``state`` in
    place; rejected actions leave it untouched.
    """
    if state.phase == "round_over":
        return _fail("Round already ended.")

    if isinstance(action, PlayCardAction):
        played = play_phase(state, action.player, action.card_id)
        if not played.ok or state.pending is None:
            return played
        resolved = resolve_phase(state)
        return StepResult(ok=resolved.ok, events=played.events + resolved.events, error=resolved.error)
    if isinstance(action, GoAction):
        return declare_go(state, action.player)
    if isinstance(action, StopAction):
        return declare_stop(state, action.player)
    return _fail("Unknown action.")
