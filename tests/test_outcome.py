from __future__ import annotations

import pytest

from matgo.engine.outcome import apply_capital_transfer, compute_breakdown, draw_outcome, stop_outcome
from matgo.engine.scoring import score_collected
from matgo.engine.state import Collected, PlayerState
from matgo.paths import get_paths
from matgo.services.content import ContentService


def _load_cards():
    paths = get_paths()
    content = ContentService(paths.data_dir, paths.schema_dir)
    return content.load_cards_db()


def _player(cards, pid: int, ids, capital: int = 50_000) -> PlayerState:
    col = Collected()
    for cid in ids:
        col.add(cards.get(cid))
    p = PlayerState(id=pid, name=f"p{pid}", capital=capital, collected=col)
    p.score = score_collected(col).total
    return p


def test_all_multipliers_stack() -> None:
    cards = _load_cards()
    winner = _player(cards, 0, (1, 9, 29))
    winner.go_count = 2
    loser = _player(cards, 1, (3, 4, 7))
    loser.is_go_bak = True

    outcome = stop_outcome(winner, loser, 100)
    b = outcome.breakdown
    assert b is not None
    assert b.base_score == 3
    assert b.go_multiplier == 3
    assert (b.is_go_bak, b.is_gwang_bak, b.is_junk_bak) == (True, True, True)
    assert b.multiplier == 24
    assert b.final_score == 72
    assert outcome.capital_change == 7200
    assert (outcome.winner, outcome.loser, outcome.is_draw) == (0, 1, False)


def test_no_gwang_bak_without_bright_points() -> None:
    cards = _load_cards()
    winner = _player(cards, 0, (1, 9, 5, 13, 30))
    loser = _player(cards, 1, (3, 4, 7, 8, 11))
    b = compute_breakdown(winner, loser)
    assert winner.score == 5
    assert not b.is_gwang_bak
    assert not b.is_junk_bak


def test_loser_holding_a_bright_blocks_gwang_bak() -> None:
    cards = _load_cards()
    winner = _player(cards, 0, (1, 9, 29))
    loser = _player(cards, 1, (41,) + (3, 4, 7, 8, 11, 12))
    b = compute_breakdown(winner, loser)
    assert not b.is_gwang_bak
    assert not b.is_junk_bak
    assert not b.is_go_bak
    assert b.multiplier == 1
    assert b.final_score == 3


def test_capital_moves_from_loser_to_winner() -> None:
    cards = _load_cards()
    human = _player(cards, 0, (1, 9, 29), capital=50_000)
    opp = _player(cards, 1, (41, 3, 4, 7, 8, 11, 12), capital=75_000)
    outcome = stop_outcome(human, opp, 250)
    apply_capital_transfer(outcome, [human, opp])
    assert outcome.capital_change == 750
    assert human.capital == 50_750
    assert opp.capital == 74_250


def test_draw_moves_nothing() -> None:
    cards = _load_cards()
    a = _player(cards, 0, (), capital=10)
    b = _player(cards, 1, (), capital=20)
    apply_capital_transfer(draw_outcome(), [a, b])
    assert (a.capital, b.capital) == (10, 20)


def test_rate_must_be_positive() -> None:
    cards = _load_cards()
    with pytest.raises(ValueError):
        stop_outcome(_player(cards, 0, (1, 9, 29)), _player(cards, 1, ()), 0)
