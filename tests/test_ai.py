from __future__ import annotations

from matgo.engine.ai import HeuristicPolicy, ai_take_turn, choose_move, decide_go_or_stop
from matgo.engine.state import Collected, PlayerState, RoundState
from matgo.paths import get_paths
from matgo.services.content import ContentService


def _load_cards():
    paths = get_paths()
    content = ContentService(paths.data_dir, paths.schema_dir)
    return content.load_cards_db()


def _player(cards, pid: int, hand=(), collected=()) -> PlayerState:
    col = Collected()
    for cid in collected:
        col.add(cards.get(cid))
    return PlayerState(id=pid, name=f"p{pid}", capital=50_000, hand=[cards.get(i) for i in hand], collected=col)


def test_prefers_completing_the_bird_set() -> None:
    cards = _load_cards()
    me = _player(cards, 0, hand=(30, 1), collected=(5, 13))
    other = _player(cards, 1, hand=(21,))
    state = RoundState(deck=[cards.get(37)], floor=[cards.get(31), cards.get(3)], players=[me, other])
    assert choose_move(state, 0).id == 30


def test_blocks_the_other_red_ribbon_set() -> None:
    cards = _load_cards()
    me = _player(cards, 0, hand=(9, 29))
    other = _player(cards, 1, hand=(21,), collected=(2, 6))
    # Capturing card 10 denies the third red ribbon
    state = RoundState(deck=[cards.get(37)], floor=[cards.get(10), cards.get(31)], players=[me, other])
    assert choose_move(state, 0).id == 9


def test_discards_the_cheapest_card() -> None:
    cards = _load_cards()
    me = _player(cards, 0, hand=(1, 17, 39))
    other = _player(cards, 1, hand=(21,))
    state = RoundState(deck=[cards.get(37)], floor=[cards.get(9)], players=[me, other])
    assert choose_move(state, 0).id == 39


def test_go_or_stop_rules() -> None:
    cards = _load_cards()
    me = _player(cards, 0)
    other = _player(cards, 1)

    me.score = 7
    assert decide_go_or_stop(me, other, deck_size=12) == "go"
    assert decide_go_or_stop(me, other, deck_size=4) == "stop"

    me.score = 10
    assert decide_go_or_stop(me, other, deck_size=12) == "stop"

    me.score = 8
    me.go_count = 2
    assert decide_go_or_stop(me, other, deck_size=12) == "stop"

    me.go_count = 0
    other.is_go_bak = True
    assert decide_go_or_stop(me, other, deck_size=4) == "go"


def test_ai_takes_only_its_own_turn() -> None:
    cards = _load_cards()
    me = _player(cards, 0, hand=(1, 17))
    other = _player(cards, 1, hand=(21, 25))
    state = RoundState(
        deck=[cards.get(13), cards.get(37)], floor=[cards.get(3), cards.get(9)], players=[me, other]
    )
    assert ai_take_turn(state, 1) is None
    res = ai_take_turn(state, 0, HeuristicPolicy())
    assert res is not None and res.ok
    assert state.current_player == 1
