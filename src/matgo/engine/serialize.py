from __future__ import annotations

import random
from collections import Counter
from typing import Mapping, Sequence, get_args

from .state import (
    AchievedSet,
    Collected,
    PendingPlay,
    PlayerState,
    RoundOutcome,
    RoundPhase,
    RoundState,
    ScoreBreakdown,
)
from .tournament import (
    BRACKET_SIZE,
    ROUND_NAMES,
    ROUND_PHASES,
    BracketRound,
    Match,
    Participant,
    TournamentConfig,
    TournamentPhase,
    TournamentState,
)
from .types import CATEGORIES, DECK_SIZE, Card, CardCatalog

SNAPSHOT_VERSION = 1


class SnapshotError(RuntimeError):
    pass


# -------- to dict --------


def _ids(cards: Sequence[Card]) -> list[int]:
    return [c.id for c in cards]


def _player_to_dict(p: PlayerState) -> dict[str, object]:
    return {
        "id": p.id,
        "name": p.name,
        "capital": p.capital,
        "hand": _ids(p.hand),
        "collected": {cat: _ids(p.collected.bucket(cat)) for cat in CATEGORIES},
        "score": p.score,
        "go_count": p.go_count,
        "is_go_bak": p.is_go_bak,
        "achieved_sets": [{"name": s.name, "card_ids": list(s.card_ids)} for s in p.achieved_sets],
    }


def _breakdown_to_dict(b: ScoreBreakdown | None) -> dict[str, object] | None:
    if b is None:
        return None
    return {
        "base_score": b.base_score,
        "go_count": b.go_count,
        "is_go_bak": b.is_go_bak,
        "is_gwang_bak": b.is_gwang_bak,
        "is_junk_bak": b.is_junk_bak,
    }


def _outcome_to_dict(o: RoundOutcome | None) -> dict[str, object] | None:
    if o is None:
        return None
    return {
        "winner": o.winner,
        "loser": o.loser,
        "is_draw": o.is_draw,
        "capital_change": o.capital_change,
        "breakdown": _breakdown_to_dict(o.breakdown),
    }


def _round_to_dict(r: RoundState | None) -> dict[str, object] | None:
    if r is None:
        return None
    pending = None
    if r.pending is not None:
        pending = {"player": r.pending.player, "card_id": r.pending.card.id}
    return {
        "deck": _ids(r.deck),
        "floor": _ids(r.floor),
        "current_player": r.current_player,
        "phase": r.phase,
        "pending": pending,
        "outcome": _outcome_to_dict(r.outcome),
    }


def _participant_to_dict(p: Participant | None) -> dict[str, object] | None:
    if p is None:
        return None
    return {"id": p.id, "name": p.name, "title": p.title, "description": p.description}


def _bracket_to_dict(bracket: Sequence[BracketRound]) -> list[dict[str, object]]:
    return [
        {
            "name": r.name,
            "matches": [
                {
                    "p1": _participant_to_dict(m.p1),
                    "p2": _participant_to_dict(m.p2),
                    "winner": _participant_to_dict(m.winner),
                }
                for m in r.matches
            ],
        }
        for r in bracket
    ]


def _rng_to_dict(rng: random.Random) -> dict[str, object]:
    version, internal, gauss_next = rng.getstate()
    return {"version": version, "internal": list(internal), "gauss_next": gauss_next}


def snapshot(state: TournamentState) -> dict[str, object]:
    """Return a JSON-serializable snapshot of the whole game.

    Restoring it with ``restore`` reproduces identical subsequent behaviour.
    """
    return {
        "version": SNAPSHOT_VERSION,
        "seed": state.seed,
        "rng_state": _rng_to_dict(state.rng),
        "phase": state.phase,
        "points_to_capital_rate": state.config.points_to_capital_rate,
        "round_index": state.round_index,
        "human": _player_to_dict(state.human),
        "opponent": _player_to_dict(state.opponent) if state.opponent is not None else None,
        "round": _round_to_dict(state.round),
        "bracket": _bracket_to_dict(state.bracket),
        "roster": [_participant_to_dict(p) for p in state.roster],
    }


# -------- from dict --------


def _require(obj: Mapping[str, object], key: str, kind: type | tuple[type, ...]) -> object:
    v = obj.get(key)
    if isinstance(v, bool) and kind is int:
        raise SnapshotError(f"Expected int for {key}")
    if not isinstance(v, kind):
        raise SnapshotError(f"Expected {kind} for {key}")
    return v


def _require_int(obj: Mapping[str, object], key: str) -> int:
    return _require(obj, key, int)  # type: ignore[return-value]


def _require_str(obj: Mapping[str, object], key: str) -> str:
    return _require(obj, key, str)  # type: ignore[return-value]


def _require_bool(obj: Mapping[str, object], key: str) -> bool:
    return _require(obj, key, bool)  # type: ignore[return-value]


def _require_dict(obj: Mapping[str, object], key: str) -> Mapping[str, object]:
    return _require(obj, key, dict)  # type: ignore[return-value]


def _optional_dict(obj: Mapping[str, object], key: str) -> Mapping[str, object] | None:
    v = obj.get(key)
    if v is None:
        return None
    if not isinstance(v, dict):
        raise SnapshotError(f"Expected object or null for {key}")
    return v


def _cards(catalog: CardCatalog, raw: object, context: str) -> list[Card]:
    if not isinstance(raw, list):
        raise SnapshotError(f"Expected card id list for {context}")
    out: list[Card] = []
    for cid in raw:
        if not isinstance(cid, int) or cid not in catalog.cards:
            raise SnapshotError(f"Unknown card id {cid!r} in {context}")
        out.append(catalog.get(cid))
    return out


def _player_from_dict(d: Mapping[str, object], catalog: CardCatalog) -> PlayerState:
    collected_raw = _require_dict(d, "collected")
    collected = Collected()
    for cat in CATEGORIES:
        for card in _cards(catalog, collected_raw.get(cat, []), f"collected.{cat}"):
            if card.category != cat:
                raise SnapshotError(f"Card {card.id} filed under {cat}")
            collected.add(card)
    sets: list[AchievedSet] = []
    raw_sets = d.get("achieved_sets", [])
    if isinstance(raw_sets, list):
        for s in raw_sets:
            if isinstance(s, dict):
                ids = s.get("card_ids", [])
                sets.append(
                    AchievedSet(
                        name=_require_str(s, "name"),
                        card_ids=tuple(i for i in ids if isinstance(i, int)) if isinstance(ids, list) else (),
                    )
                )
    return PlayerState(
        id=_require_int(d, "id"),
        name=_require_str(d, "name"),
        capital=_require_int(d, "capital"),
        hand=_cards(catalog, d.get("hand"), "hand"),
        collected=collected,
        score=_require_int(d, "score"),
        go_count=_require_int(d, "go_count"),
        is_go_bak=_require_bool(d, "is_go_bak"),
        achieved_sets=sets,
    )


def _outcome_from_dict(d: Mapping[str, object] | None) -> RoundOutcome | None:
    if d is None:
        return None
    b = _optional_dict(d, "breakdown")
    breakdown = None
    if b is not None:
        breakdown = ScoreBreakdown(
            base_score=_require_int(b, "base_score"),
            go_count=_require_int(b, "go_count"),
            is_go_bak=_require_bool(b, "is_go_bak"),
            is_gwang_bak=_require_bool(b, "is_gwang_bak"),
            is_junk_bak=_require_bool(b, "is_junk_bak"),
        )
    outcome = RoundOutcome(
        winner=_optional_seat(d, "winner"),
        loser=_optional_seat(d, "loser"),
        is_draw=_require_bool(d, "is_draw"),
        capital_change=_require_int(d, "capital_change"),
        breakdown=breakdown,
    )
    if outcome.capital_change < 0:
        raise SnapshotError("capital_change must not be negative")
    if outcome.is_draw:
        if outcome.winner is not None or outcome.loser is not None or outcome.capital_change:
            raise SnapshotError("A draw has no winner, loser or capital change")
    elif outcome.winner is None or outcome.loser is None or outcome.winner == outcome.loser:
        raise SnapshotError("A decided round needs two different seats as winner and loser")
    return outcome


def _optional_seat(d: Mapping[str, object], key: str) -> int | None:
    v = d.get(key)
    if v is None:
        return None
    if isinstance(v, bool) or v not in (0, 1):
        raise SnapshotError(f"{key} must be 0, 1 or null")
    return v  # type: ignore[return-value]


def _round_from_dict(
    d: Mapping[str, object], players: list[PlayerState], catalog: CardCatalog, rate: int
) -> RoundState:
    phase = _require_str(d, "phase")
    if phase not in get_args(RoundPhase):
        raise SnapshotError(f"Unknown round phase {phase!r}")
    pending = None
    raw_pending = _optional_dict(d, "pending")
    if raw_pending is not None:
        cid = _require_int(raw_pending, "card_id")
        if cid not in catalog.cards:
            raise SnapshotError(f"Unknown pending card {cid}")
        pending = PendingPlay(player=_require_int(raw_pending, "player"), card=catalog.get(cid))
    state = RoundState(
        deck=_cards(catalog, d.get("deck"), "deck"),
        floor=_cards(catalog, d.get("floor"), "floor"),
        players=players,
        current_player=_require_int(d, "current_player"),
        phase=phase,  # type: ignore[arg-type]
        pending=pending,
        outcome=_outcome_from_dict(_optional_dict(d, "outcome")),
        points_to_capital_rate=rate,
    )
    if state.current_player not in (0, 1):
        raise SnapshotError("current_player must be 0 or 1")
    if pending is not None and pending.player != state.current_player:
        raise SnapshotError("Pending play belongs to the player on turn")
    if pending is not None and phase != "playing":
        raise SnapshotError("A pending play only exists while playing")
    # An over round needs something to settle; a live one must not be settled yet
    if (state.outcome is not None) != (phase == "round_over"):
        raise SnapshotError("Round outcome must be present exactly when the round is over")
    if phase == "playing" and pending is None and not players[state.current_player].hand:
        raise SnapshotError("Player on turn has no card to play")
    counts = Counter(state.all_card_ids())
    if len(counts) != DECK_SIZE or any(n != 1 for n in counts.values()):
        raise SnapshotError("Round zones must hold every card exactly once")
    return state


def _participant_from_dict(d: object) -> Participant | None:
    if d is None:
        return None
    if not isinstance(d, dict):
        raise SnapshotError("Participant must be an object or null")
    title = d.get("title", "")
    desc = d.get("description", "")
    return Participant(
        id=_require_str(d, "id"),
        name=_require_str(d, "name"),
        title=title if isinstance(title, str) else "",
        description=desc if isinstance(desc, str) else "",
    )


def _bracket_from_dict(raw: object, phase: str) -> list[BracketRound]:
    if not isinstance(raw, list):
        raise SnapshotError("bracket must be a list")
    if not raw and phase == "tournament_intro":
        return []
    if len(raw) != len(ROUND_NAMES):
        raise SnapshotError(f"bracket must have {len(ROUND_NAMES)} rounds, got {len(raw)}")
    out: list[BracketRound] = []
    for r in raw:
        if not isinstance(r, dict):
            raise SnapshotError("bracket round must be an object")
        raw_matches = r.get("matches")
        if not isinstance(raw_matches, list):
            raise SnapshotError("bracket round matches must be a list")
        matches = [
            Match(
                p1=_participant_from_dict(m.get("p1")),
                p2=_participant_from_dict(m.get("p2")),
                winner=_participant_from_dict(m.get("winner")),
            )
            for m in raw_matches
            if isinstance(m, dict)
        ]
        out.append(BracketRound(name=_require_str(r, "name"), matches=matches))
    expected = BRACKET_SIZE // 2
    for i, r in enumerate(out):
        if len(r.matches) != expected:
            raise SnapshotError(f"bracket round {i} must have {expected} matches, got {len(r.matches)}")
        expected //= 2
    return out


def _rng_from_dict(d: Mapping[str, object]) -> random.Random:
    internal = d.get("internal")
    if not isinstance(internal, list) or not all(isinstance(x, int) for x in internal):
        raise SnapshotError("rng_state.internal must be a list of ints")
    gauss_next = d.get("gauss_next")
    if gauss_next is not None and not isinstance(gauss_next, (int, float)):
        raise SnapshotError("rng_state.gauss_next must be a number or null")
    rng = random.Random()
    try:
        rng.setstate((_require_int(d, "version"), tuple(internal), gauss_next))
    except (TypeError, ValueError) as e:
        raise SnapshotError(f"Invalid rng_state: {e}") from e
    return rng


def restore(data: Mapping[str, object], catalog: CardCatalog) -> TournamentState:
    """Rebuild a ``TournamentState`` from ``snapshot`` output.

    Raises ``SnapshotError`` on anything malformed; never returns partial state.
    """
    if _require_int(data, "version") != SNAPSHOT_VERSION:
        raise SnapshotError("Unsupported snapshot version")
    phase = _require_str(data, "phase")
    if phase not in get_args(TournamentPhase):
        raise SnapshotError(f"Unknown phase {phase!r}")
    try:
        config = TournamentConfig(points_to_capital_rate=_require_int(data, "points_to_capital_rate"))
    except ValueError as e:
        raise SnapshotError(str(e)) from e

    human = _player_from_dict(_require_dict(data, "human"), catalog)
    raw_opp = _optional_dict(data, "opponent")
    opponent = _player_from_dict(raw_opp, catalog) if raw_opp is not None else None
    # Seat ids double as indexes into the round's player list
    if human.id != 0 or (opponent is not None and opponent.id != 1):
        raise SnapshotError("Seat ids must be 0 (human) and 1 (opponent)")

    rnd = None
    raw_round = _optional_dict(data, "round")
    if raw_round is not None:
        if opponent is None:
            raise SnapshotError("A round needs an opponent")
        rnd = _round_from_dict(raw_round, [human, opponent], catalog, config.points_to_capital_rate)
        if rnd.phase != phase:
            raise SnapshotError("Round phase does not match game phase")
    elif phase in ROUND_PHASES:
        raise SnapshotError(f"Phase {phase!r} needs a round in progress")

    round_index = _require_int(data, "round_index")
    if not 0 <= round_index < len(ROUND_NAMES):
        raise SnapshotError(f"round_index {round_index} is out of range")
    bracket = _bracket_from_dict(data.get("bracket"), phase)

    roster_raw = data.get("roster")
    if not isinstance(roster_raw, list):
        raise SnapshotError("roster must be a list")
    roster = tuple(p for p in (_participant_from_dict(r) for r in roster_raw) if p is not None)

    return TournamentState(
        catalog=catalog,
        roster=roster,
        config=config,
        seed=_require_int(data, "seed"),
        rng=_rng_from_dict(_require_dict(data, "rng_state")),
        human=human,
        phase=phase,  # type: ignore[arg-type]
        bracket=bracket,
        round_index=round_index,
        opponent=opponent,
        round=rnd,
    )
