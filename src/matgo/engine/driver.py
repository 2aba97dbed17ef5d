"""Synchronous turn driver.

Advances a tournament one decision at a time, asking a policy per seat for
card and go/stop choices. Each card play is run as two explicit calls,
``play_phase`` then ``resolve_phase``, so the played card is fully settled
before the drawn card is looked at.
"""

from __future__ import annotations

from typing import Callable, Sequence

from . import tournament as tm
from .actions import decision_to_action
from .ai import Policy
from .rules import StepResult

TERMINAL_PHASES = ("game_over", "tournament_complete")

EventSink = Callable[[StepResult], None]


def advance(state: tm.TournamentState, policies: Sequence[Policy]) -> StepResult | None:
    """Perform the next pending transition. Returns None in a terminal phase."""
    if state.phase in TERMINAL_PHASES:
        return None
    if state.phase == "tournament_intro":
        return tm.start_tournament(state)
    if state.phase == "match_intro":
        return tm.start_match(state)
    if state.phase == "round_over":
        return tm.finish_round(state)

    rnd = state.round
    assert rnd is not None
    player = rnd.current_player
    policy = policies[player]

    if state.phase == "go_or_stop":
        decision = policy.choose_go_or_stop(rnd, player)
        return tm.step(state, decision_to_action(player, decision))

    if rnd.pending is not None:
        return tm.resolve_phase(state)
    card = policy.choose_move(rnd, player)
    played = tm.play_phase(state, player, card.id)
    if not played.ok or rnd.pending is None:
        return played
    resolved = tm.resolve_phase(state)
    return StepResult(ok=resolved.ok, events=played.events + resolved.events, error=resolved.error)


def autoplay(
    state: tm.TournamentState,
    policies: Sequence[Policy],
    max_steps: int = 100_000,
    on_step: EventSink | None = None,
) -> int:
    """Drive ``state`` until a terminal phase or ``max_steps``. Returns steps taken."""
    if len(policies) != 2:
        raise ValueError("autoplay needs one policy per seat")
    steps = 0
    while steps < max_steps:
        result = advance(state, policies)
        if result is None:
            break
        steps += 1
        if on_step is not None:
            on_step(result)
        if not result.ok and state.phase in ("playing", "go_or_stop"):
            # A policy offered an illegal move; stop rather than spin.
            break
    return steps
