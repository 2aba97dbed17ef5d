from __future__ import annotations

from .scoring import bright_points, effective_junk_count
from .state import PlayerState, RoundOutcome, ScoreBreakdown

JUNK_BAK_LIMIT = 4


def compute_breakdown(winner: PlayerState, loser: PlayerState) -> ScoreBreakdown:
    """Evaluate the go count and the three bak conditions at the moment of stop."""
    scored_with_brights = bright_points(winner.collected.bright) > 0
    return ScoreBreakdown(
        base_score=winner.score,
        go_count=winner.go_count,
        is_go_bak=loser.is_go_bak,
        is_gwang_bak=scored_with_brights and not loser.collected.bright,
        is_junk_bak=effective_junk_count(loser.collected) <= JUNK_BAK_LIMIT,
    )


def stop_outcome(winner: PlayerState, loser: PlayerState, points_to_capital_rate: int) -> RoundOutcome:
    if points_to_capital_rate <= 0:
        raise ValueError("points_to_capital_rate must be positive")
    breakdown = compute_breakdown(winner, loser)
    return RoundOutcome(
        winner=winner.id,
        loser=loser.id,
        is_draw=False,
        capital_change=breakdown.final_score * points_to_capital_rate,
        breakdown=breakdown,
    )


def draw_outcome() -> RoundOutcome:
    return RoundOutcome(winner=None, loser=None, is_draw=True, capital_change=0)


def apply_capital_transfer(outcome: RoundOutcome, players: list[PlayerState]) -> None:
    """Move ``capital_change`` from loser to winner. Draws change nothing."""
    if outcome.is_draw or outcome.winner is None or outcome.loser is None:
        return
    players[outcome.winner].capital += outcome.capital_change
    players[outcome.loser].capital -= outcome.capital_change
