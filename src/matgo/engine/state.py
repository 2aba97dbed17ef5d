from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Literal

from .types import CATEGORIES, Card, CardCategory

Event = dict[str, object]

RoundPhase = Literal["playing", "go_or_stop", "round_over"]

HUMAN = 0
OPPONENT = 1


@dataclass
class Collected:
    """A player's captured cards, bucketed by category.

    Insertion order is kept for display only; scoring never depends on it.
    """

    bright: list[Card] = field(default_factory=list)
    animal: list[Card] = field(default_factory=list)
    ribbon: list[Card] = field(default_factory=list)
    junk: list[Card] = field(default_factory=list)

    def bucket(self, category: CardCategory) -> list[Card]:
        if category not in CATEGORIES:
            raise KeyError(category)
        return getattr(self, category)

    def add(self, card: Card) -> None:
        self.bucket(card.category).append(card)

    def __iter__(self) -> Iterator[Card]:
        for category in CATEGORIES:
            yield from self.bucket(category)

    def __len__(self) -> int:
        return sum(len(self.bucket(c)) for c in CATEGORIES)


@dataclass(frozen=True)
class AchievedSet:
    name: str
    card_ids: tuple[int, ...]


@dataclass
class PlayerState:
    id: int
    name: str
    capital: int
    hand: list[Card] = field(default_factory=list)
    collected: Collected = field(default_factory=Collected)
    score: int = 0
    go_count: int = 0
    is_go_bak: bool = False  # set once the other player has called go
    achieved_sets: list[AchievedSet] = field(default_factory=list)

    def reset_for_round(self) -> None:
        self.hand = []
        self.collected = Collected()
        self.score = 0
        self.go_count = 0
        self.is_go_bak = False
        self.achieved_sets = []

    def find_in_hand(self, card_id: int) -> Card | None:
        for c in self.hand:
            if c.id == card_id:
                return c
        return None


@dataclass(frozen=True)
class ScoreBreakdown:
    base_score: int
    go_count: int
    is_go_bak: bool
    is_gwang_bak: bool
    is_junk_bak: bool

    @property
    def go_multiplier(self) -> int:
        return self.go_count + 1 if self.go_count > 0 else 1

    @property
    def multiplier(self) -> int:
        m = self.go_multiplier
        for flag in (self.is_go_bak, self.is_gwang_bak, self.is_junk_bak):
            if flag:
                m *= 2
        return m

    @property
    def final_score(self) -> int:
        return self.base_score * self.multiplier


@dataclass(frozen=True)
class RoundOutcome:
    winner: int | None
    loser: int | None
    is_draw: bool
    capital_change: int
    breakdown: ScoreBreakdown | None = None


@dataclass(frozen=True)
class PendingPlay:
    """A card taken from the hand by ``play_phase`` and not yet resolved."""

    player: int
    card: Card


@dataclass
class RoundState:
    deck: list[Card]
    floor: list[Card]
    players: list[PlayerState]
    current_player: int = HUMAN
    phase: RoundPhase = "playing"
    pending: PendingPlay | None = None
    outcome: RoundOutcome | None = None
    points_to_capital_rate: int = 100
    event_log: list[Event] = field(default_factory=list)

    def opponent(self, player: int) -> int:
        return 1 - player

    def all_card_ids(self) -> list[int]:
        """Every card id held anywhere in the round, for zone invariant checks."""
        ids = [c.id for c in self.deck] + [c.id for c in self.floor]
        for p in self.players:
            ids.extend(c.id for c in p.hand)
            ids.extend(c.id for c in p.collected)
        if self.pending is not None:
            ids.append(self.pending.card.id)
        return ids
