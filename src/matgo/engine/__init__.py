"""Deterministic, headless rules engine for Tournament Matgo.

IMPORTANT: This package must never import a UI toolkit.
"""

from .actions import GoAction, PlayCardAction, StopAction
from .ai import HeuristicPolicy, Policy
from .driver import advance, autoplay
from .rules import StepResult, legal_moves, new_round, step
from .serialize import SnapshotError, restore, snapshot
from .state import PlayerState, RoundOutcome, RoundState, ScoreBreakdown
from .tournament import (
    BracketError,
    Participant,
    TournamentConfig,
    TournamentState,
    new_tournament,
    start_tournament,
)
from .types import Card, CardCatalog, CardCategory

__all__ = [
    "BracketError",
    "Card",
    "CardCatalog",
    "CardCategory",
    "GoAction",
    "HeuristicPolicy",
    "Participant",
    "PlayCardAction",
    "PlayerState",
    "Policy",
    "RoundOutcome",
    "RoundState",
    "ScoreBreakdown",
    "SnapshotError",
    "StepResult",
    "StopAction",
    "TournamentConfig",
    "TournamentState",
    "advance",
    "autoplay",
    "legal_moves",
    "new_round",
    "new_tournament",
    "restore",
    "snapshot",
    "start_tournament",
    "step",
]
