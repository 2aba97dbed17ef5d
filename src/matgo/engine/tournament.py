from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Literal, Sequence

from . import rules
from .actions import Action
from .outcome import apply_capital_transfer
from .rules import DEFAULT_POINTS_TO_CAPITAL_RATE, StepResult
from .state import HUMAN, OPPONENT, Event, PlayerState, RoundState
from .types import CardCatalog

TournamentPhase = Literal[
    "tournament_intro",
    "match_intro",
    "playing",
    "go_or_stop",
    "round_over",
    "game_over",
    "tournament_complete",
]

PLAYER_PARTICIPANT_ID = "player"
BRACKET_SIZE = 16
ROUND_NAMES: tuple[str, ...] = ("Round of 16", "Quarterfinal", "Semifinal", "Final")
BASE_STARTING_CAPITAL = 50_000
CAPITAL_INCREMENT_PER_ROUND = 25_000

ROUND_PHASES: tuple[TournamentPhase, ...] = ("playing", "go_or_stop", "round_over")


class BracketError(RuntimeError):
    pass


@dataclass(frozen=True)
class TournamentConfig:
    points_to_capital_rate: int = DEFAULT_POINTS_TO_CAPITAL_RATE

    def __post_init__(self) -> None:
        rate = self.points_to_capital_rate
        if isinstance(rate, bool) or not isinstance(rate, int) or rate <= 0:
            raise ValueError(f"points_to_capital_rate must be a positive integer, got {rate!r}")


@dataclass(frozen=True)
class Participant:
    id: str
    name: str
    title: str = ""
    description: str = ""

    @property
    def is_human(self) -> bool:
        return self.id == PLAYER_PARTICIPANT_ID


@dataclass
class Match:
    p1: Participant | None = None
    p2: Participant | None = None
    winner: Participant | None = None

    def has(self, participant_id: str) -> bool:
        return any(p is not None and p.id == participant_id for p in (self.p1, self.p2))

    def other(self, participant_id: str) -> Participant | None:
        if self.p1 is not None and self.p1.id == participant_id:
            return self.p2
        if self.p2 is not None and self.p2.id == participant_id:
            return self.p1
        return None


@dataclass
class BracketRound:
    name: str
    matches: list[Match]


@dataclass
class TournamentState:
    catalog: CardCatalog
    roster: tuple[Participant, ...]
    config: TournamentConfig
    seed: int
    rng: random.Random
    human: PlayerState
    phase: TournamentPhase = "tournament_intro"
    bracket: list[BracketRound] = field(default_factory=list)
    round_index: int = 0
    opponent: PlayerState | None = None
    round: RoundState | None = None
    event_log: list[Event] = field(default_factory=list)

    @property
    def round_name(self) -> str:
        if 0 <= self.round_index < len(ROUND_NAMES):
            return ROUND_NAMES[self.round_index]
        return ""


def human_participant(name: str = "Player") -> Participant:
    return Participant(id=PLAYER_PARTICIPANT_ID, name=name, title="Challenger")


def opponent_capital(round_index: int) -> int:
    return BASE_STARTING_CAPITAL + round_index * CAPITAL_INCREMENT_PER_ROUND


def build_bracket(participants: Sequence[Participant], rng: random.Random) -> list[BracketRound]:
    """Shuffle ``participants`` into a full first round plus empty later rounds."""
    if len(participants) != BRACKET_SIZE:
        raise BracketError(f"Bracket needs exactly {BRACKET_SIZE} participants, got {len(participants)}.")
    ids = [p.id for p in participants]
    if len(set(ids)) != len(ids):
        raise BracketError("Participant ids must be unique.")
    if ids.count(PLAYER_PARTICIPANT_ID) != 1:
        raise BracketError("Exactly one human participant is required.")

    seeded = list(participants)
    rng.shuffle(seeded)
    first = [Match(p1=seeded[i], p2=seeded[i + 1]) for i in range(0, BRACKET_SIZE, 2)]
    bracket = [BracketRound(name=ROUND_NAMES[0], matches=first)]
    size = len(first)
    for name in ROUND_NAMES[1:]:
        size //= 2
        bracket.append(BracketRound(name=name, matches=[Match() for _ in range(size)]))
    return bracket


def find_player_match(bracket: Sequence[BracketRound], round_index: int) -> tuple[int, Match] | None:
    if round_index < 0 or round_index >= len(bracket):
        return None
    for i, m in enumerate(bracket[round_index].matches):
        if m.has(PLAYER_PARTICIPANT_ID):
            return i, m
    return None


def new_tournament(
    catalog: CardCatalog,
    roster: Sequence[Participant],
    seed: int,
    config: TournamentConfig | None = None,
    player_name: str = "Player",
) -> TournamentState:
    if len(roster) != BRACKET_SIZE - 1:
        raise BracketError(f"Roster must list {BRACKET_SIZE - 1} opponents.")
    return TournamentState(
        catalog=catalog,
        roster=tuple(roster),
        config=config or TournamentConfig(),
        seed=seed,
        rng=random.Random(seed),
        human=PlayerState(id=HUMAN, name=player_name, capital=BASE_STARTING_CAPITAL),
    )


def start_tournament(state: TournamentState, config: TournamentConfig | None = None) -> StepResult:
    if state.phase not in ("tournament_intro", "game_over", "tournament_complete"):
        return StepResult(ok=False, events=[], error="A tournament is already in progress.")
    start = len(state.event_log)
    _restart(state, config)
    return StepResult(ok=True, events=state.event_log[start:])


def _restart(state: TournamentState, config: TournamentConfig | None = None) -> None:
    if config is not None:
        state.config = config
    state.human = PlayerState(id=HUMAN, name=state.human.name, capital=BASE_STARTING_CAPITAL)
    everyone = [human_participant(state.human.name), *state.roster]
    state.bracket = build_bracket(everyone, state.rng)
    state.round_index = 0
    state.opponent = None
    state.round = None
    state.phase = "match_intro"
    state.event_log.append(
        {"type": "TOURNAMENT_STARTED", "rate": state.config.points_to_capital_rate}
    )


def reset_tournament(state: TournamentState) -> None:
    """Abandon whatever is in progress and return to the intro screen."""
    state.human = PlayerState(id=HUMAN, name=state.human.name, capital=BASE_STARTING_CAPITAL)
    state.bracket = []
    state.round_index = 0
    state.opponent = None
    state.round = None
    state.phase = "tournament_intro"
    state.event_log.append({"type": "TOURNAMENT_RESET"})


def _bracket_defect(state: TournamentState, reason: str) -> StepResult:
    start = len(state.event_log)
    state.event_log.append(
        {"type": "BRACKET_DEFECT", "reason": reason, "round_index": state.round_index}
    )
    _restart(state)
    return StepResult(
        ok=False,
        events=state.event_log[start:],
        error="Bracket inconsistency; tournament restarted.",
    )


def current_opponent_participant(state: TournamentState) -> Participant | None:
    found = find_player_match(state.bracket, state.round_index)
    if found is None:
        return None
    return found[1].other(PLAYER_PARTICIPANT_ID)


def start_match(state: TournamentState) -> StepResult:
    if state.phase != "match_intro":
        return StepResult(ok=False, events=[], error="No match is waiting to start.")
    opponent = current_opponent_participant(state)
    if opponent is None:
        return _bracket_defect(state, "no_next_opponent")

    start = len(state.event_log)
    state.opponent = PlayerState(
        id=OPPONENT, name=opponent.name, capital=opponent_capital(state.round_index)
    )
    state.event_log.append(
        {
            "type": "MATCH_STARTED",
            "round_index": state.round_index,
            "opponent": opponent.id,
            "opponent_capital": state.opponent.capital,
        }
    )
    _deal(state)
    return StepResult(ok=True, events=state.event_log[start:])


def _deal(state: TournamentState) -> None:
    assert state.opponent is not None
    state.round = rules.new_round(
        [state.human, state.opponent],
        state.catalog,
        state.rng,
        state.config.points_to_capital_rate,
    )
    state.phase = state.round.phase


def _sync_phase(state: TournamentState) -> None:
    if state.round is not None and state.phase in ROUND_PHASES:
        state.phase = state.round.phase


def _require_round(state: TournamentState) -> RoundState | None:
    if state.phase not in ("playing", "go_or_stop") or state.round is None:
        return None
    return state.round


def step(state: TournamentState, action: Action) -> StepResult:
    rnd = _require_round(state)
    if rnd is None:
        return StepResult(ok=False, events=[], error="No round in play.")
    result = rules.step(rnd, action)
    _sync_phase(state)
    return result


def play_phase(state: TournamentState, player: int, card_id: int) -> StepResult:
    rnd = _require_round(state)
    if rnd is None:
        return StepResult(ok=False, events=[], error="No round in play.")
    result = rules.play_phase(rnd, player, card_id)
    _sync_phase(state)
    return result


def resolve_phase(state: TournamentState) -> StepResult:
    rnd = _require_round(state)
    if rnd is None:
        return StepResult(ok=False, events=[], error="No round in play.")
    result = rules.resolve_phase(rnd)
    _sync_phase(state)
    return result


def finish_round(state: TournamentState) -> StepResult:
    """Settle a finished round and decide what the tournament does next."""
    if state.phase != "round_over" or state.round is None or state.round.outcome is None:
        return StepResult(ok=False, events=[], error="No finished round to settle.")
    if state.opponent is None:
        return _bracket_defect(state, "missing_opponent")

    start = len(state.event_log)
    outcome = state.round.outcome
    apply_capital_transfer(outcome, [state.human, state.opponent])
    state.event_log.append(
        {
            "type": "ROUND_SETTLED",
            "winner": outcome.winner,
            "is_draw": outcome.is_draw,
            "capital_change": outcome.capital_change,
            "human_capital": state.human.capital,
            "opponent_capital": state.opponent.capital,
        }
    )

    if state.human.capital <= 0:
        state.phase = "game_over"
        state.round = None
        state.event_log.append({"type": "GAME_OVER", "round_index": state.round_index})
    elif state.opponent.capital <= 0:
        defect = _advance_bracket(state)
        if defect is not None:
            return defect
    else:
        _deal(state)
    return StepResult(ok=True, events=state.event_log[start:])


def _advance_bracket(state: TournamentState) -> StepResult | None:
    found = find_player_match(state.bracket, state.round_index)
    if found is None:
        return _bracket_defect(state, "player_match_missing")
    match_index, match = found
    human = match.p1 if match.p1 is not None and match.p1.is_human else match.p2
    match.winner = human
    state.event_log.append(
        {"type": "MATCH_WON", "round_index": state.round_index, "match_index": match_index}
    )

    next_index = state.round_index + 1
    if next_index >= len(ROUND_NAMES):
        state.phase = "tournament_complete"
        state.round = None
        state.event_log.append({"type": "TOURNAMENT_COMPLETE"})
        return None

    try:
        _resolve_unplayed(state.bracket, state.round_index)
        _populate_next_round(state.bracket, state.round_index)
    except BracketError as e:
        return _bracket_defect(state, str(e))

    state.round_index = next_index
    state.opponent = None
    state.round = None
    state.phase = "match_intro"
    return None


def _resolve_unplayed(bracket: list[BracketRound], round_index: int) -> None:
    # Placeholder rule: the first occupied slot advances. Not a real playout.
    for m in bracket[round_index].matches:
        if m.winner is None:
            m.winner = m.p1 if m.p1 is not None else m.p2
            if m.winner is None:
                raise BracketError(f"empty_match_in_round_{round_index}")


def _populate_next_round(bracket: list[BracketRound], round_index: int) -> None:
    if round_index + 1 >= len(bracket):
        raise BracketError(f"round_{round_index + 1}_missing")
    current = bracket[round_index].matches
    nxt = bracket[round_index + 1].matches
    if len(nxt) * 2 != len(current):
        raise BracketError(f"round_{round_index + 1}_size_mismatch")
    for k in range(len(nxt)):
        nxt[k] = Match(p1=current[2 * k].winner, p2=current[2 * k + 1].winner)
