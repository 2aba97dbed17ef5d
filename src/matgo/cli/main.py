from __future__ import annotations

import argparse
import random
import sys
from pathlib import Path

from matgo.engine.ai import HeuristicPolicy
from matgo.engine.driver import autoplay
from matgo.engine.rules import StepResult
from matgo.engine.tournament import (
    PLAYER_PARTICIPANT_ID,
    TournamentConfig,
    TournamentState,
    new_tournament,
)
from matgo.paths import get_paths
from matgo.services.content import ContentError, ContentService
from matgo.services.savegame import SaveGameService
from matgo.services.telemetry import TelemetryService

CHECKPOINT_EVENTS = frozenset({"TOURNAMENT_STARTED", "ROUND_SETTLED"})


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="matgo",
        description="Play a 16-entrant Matgo tournament with both seats on autopilot.",
    )
    parser.add_argument("--seed", type=int, default=None, help="RNG seed for a new tournament")
    parser.add_argument("--rate", type=int, default=100, help="capital per final point")
    parser.add_argument("--name", default="Player", help="name of the human seat")
    parser.add_argument("--save", type=Path, default=None, help="save file (default: userdata/savegame.json)")
    parser.add_argument("--fresh", action="store_true", help="ignore any existing save")
    parser.add_argument("--max-steps", type=int, default=100_000, help="stop after this many transitions")
    return parser


def _describe(state: TournamentState, result: StepResult) -> None:
    for ev in result.events:
        t = ev.get("type")
        if t == "MATCH_STARTED":
            print(f"{state.round_name}: vs {ev['opponent']} (capital {ev['opponent_capital']})")
        elif t == "MATCH_WON":
            print(f"  won, capital {state.human.capital}")
        elif t == "BRACKET_DEFECT":
            print(f"  bracket defect ({ev['reason']}); tournament restarted", file=sys.stderr)


def _champion(state: TournamentState) -> str | None:
    if not state.bracket or not state.bracket[-1].matches:
        return None
    winner = state.bracket[-1].matches[0].winner
    return winner.name if winner is not None else None


def main() -> int:
    parser = _build_parser()
    args = parser.parse_args()
    try:
        config = TournamentConfig(points_to_capital_rate=args.rate)
    except ValueError as e:
        parser.error(str(e))
    if args.max_steps <= 0:
        parser.error("--max-steps must be positive")

    paths = get_paths()
    content = ContentService(data_dir=paths.data_dir, schema_dir=paths.schema_dir)
    telemetry = TelemetryService(paths.userdata_dir / "telemetry.jsonl")
    saves = SaveGameService(args.save or paths.userdata_dir / "savegame.json", content, telemetry)

    try:
        catalog = content.load_cards_db()
        roster = content.load_opponents()
    except ContentError as e:
        print(str(e), file=sys.stderr)
        return 2

    state = None if args.fresh else saves.load(catalog)
    if state is None:
        seed = args.seed if args.seed is not None else random.randrange(2**31)
        state = new_tournament(catalog, roster, seed=seed, config=config, player_name=args.name)
        telemetry.log("tournament_created", {"seed": seed, "rate": config.points_to_capital_rate})
    else:
        print(f"Resuming {state.round_name} (seed {state.seed})")

    def on_step(result: StepResult) -> None:
        telemetry.log_events(result.events)
        _describe(state, result)
        if any(ev.get("type") in CHECKPOINT_EVENTS for ev in result.events):
            saves.save(state)

    steps = autoplay(state, [HeuristicPolicy(), HeuristicPolicy()], max_steps=args.max_steps, on_step=on_step)
    saves.save(state)

    if state.phase == "tournament_complete":
        champion = _champion(state) or PLAYER_PARTICIPANT_ID
        print(f"Tournament complete after {steps} steps. Champion: {champion}")
    elif state.phase == "game_over":
        print(f"Eliminated in the {state.round_name} after {steps} steps.")
    else:
        print(f"Paused in {state.phase} after {steps} steps; progress saved to {saves.path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
