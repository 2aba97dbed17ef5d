from __future__ import annotations

from matgo.engine.capture import resolve_play, steal_junk
from matgo.engine.state import Collected
from matgo.paths import get_paths
from matgo.services.content import ContentService


def _load_cards():
    paths = get_paths()
    content = ContentService(paths.data_dir, paths.schema_dir)
    return content.load_cards_db()


def _ids(cards) -> list[int]:
    return sorted(c.id for c in cards)


def test_single_match_then_unmatched_flip() -> None:
    cards = _load_cards()
    floor = [cards.get(3), cards.get(9)]
    result = resolve_play(cards.get(1), floor, cards.get(17))
    assert result.event == "chok"
    assert _ids(result.captured) == [1, 3]
    assert _ids(result.new_floor) == [9, 17]
    assert not result.steal


def test_ppeok_stacks_three_of_a_month() -> None:
    cards = _load_cards()
    floor = [cards.get(3), cards.get(9), cards.get(13)]
    result = resolve_play(cards.get(1), floor, cards.get(4))
    assert result.event == "ppeok"
    assert result.captured == ()
    assert len(result.new_floor) == len(floor) + 2
    assert _ids(result.new_floor) == [1, 3, 4, 9, 13]
    assert not result.steal


def test_jjok_takes_both_and_steals() -> None:
    cards = _load_cards()
    floor = [cards.get(9), cards.get(13)]
    result = resolve_play(cards.get(1), floor, cards.get(3))
    assert result.event == "jjok"
    assert _ids(result.captured) == [1, 3]
    assert _ids(result.new_floor) == [9, 13]
    assert result.steal


def test_double_match_takes_the_month_and_steals() -> None:
    cards = _load_cards()
    floor = [cards.get(2), cards.get(3), cards.get(9)]
    result = resolve_play(cards.get(1), floor, cards.get(21))
    assert result.event == "double_chok"
    assert _ids(result.captured) == [1, 2, 3]
    assert _ids(result.new_floor) == [9, 21]
    assert result.steal


def test_flip_captures_when_hand_card_misses() -> None:
    cards = _load_cards()
    floor = [cards.get(9), cards.get(13)]
    result = resolve_play(cards.get(1), floor, cards.get(10))
    assert result.event == "chok"
    assert _ids(result.captured) == [9, 10]
    assert _ids(result.new_floor) == [1, 13]


def test_nothing_matches() -> None:
    cards = _load_cards()
    floor = [cards.get(9)]
    result = resolve_play(cards.get(1), floor, cards.get(13))
    assert result.event == "plain"
    assert result.captured == ()
    assert _ids(result.new_floor) == [1, 9, 13]


def test_hand_and_flip_both_capture() -> None:
    cards = _load_cards()
    floor = [cards.get(3), cards.get(10)]
    result = resolve_play(cards.get(1), floor, cards.get(9))
    assert result.event == "chok"
    assert _ids(result.captured) == [1, 3, 9, 10]
    assert result.new_floor == ()


def test_resolve_does_not_touch_the_input_floor() -> None:
    cards = _load_cards()
    floor = [cards.get(3), cards.get(9)]
    resolve_play(cards.get(1), floor, cards.get(10))
    assert _ids(floor) == [3, 9]


def test_steal_prefers_single_junk() -> None:
    cards = _load_cards()
    victim = Collected(junk=[cards.get(44), cards.get(3)])
    thief = Collected()
    stolen = steal_junk(victim, thief)
    assert stolen is not None and stolen.id == 3
    assert _ids(victim.junk) == [44]
    assert _ids(thief.junk) == [3]


def test_steal_from_empty_junk_is_a_no_op() -> None:
    cards = _load_cards()
    victim = Collected(animal=[cards.get(5)])
    thief = Collected()
    assert steal_junk(victim, thief) is None
    assert len(victim) == 1
    assert len(thief) == 0
