"""
Poker hand evaluation.

Hands are ranked with the treys lookup tables. HandRank adds the
category, the five cards that play and a readable description on top
of the treys score.
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import IntEnum
from itertools import combinations
from typing import Iterable

from treys import Evaluator

from .cards import Card, CardLike, full_deck, parse_cards


class HandCategory(IntEnum):
    """Hand categories, weakest first."""
    HIGH_CARD = 0
    PAIR = 1
    TWO_PAIR = 2
    THREE_OF_A_KIND = 3
    STRAIGHT = 4
    FLUSH = 5
    FULL_HOUSE = 6
    FOUR_OF_A_KIND = 7
    STRAIGHT_FLUSH = 8

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]


CATEGORY_LABELS = {
    HandCategory.HIGH_CARD: "High Card",
    HandCategory.PAIR: "Pair",
    HandCategory.TWO_PAIR: "Two Pair",
    HandCategory.THREE_OF_A_KIND: "Three of a Kind",
    HandCategory.STRAIGHT: "Straight",
    HandCategory.FLUSH: "Flush",
    HandCategory.FULL_HOUSE: "Full House",
    HandCategory.FOUR_OF_A_KIND: "Four of a Kind",
    HandCategory.STRAIGHT_FLUSH: "Straight Flush",
}

RANK_NAMES = {
    2: "Two", 3: "Three", 4: "Four", 5: "Five", 6: "Six", 7: "Seven",
    8: "Eight", 9: "Nine", 10: "Ten", 11: "Jack", 12: "Queen",
    13: "King", 14: "Ace",
}
RANK_PLURALS = {r: ("Sixes" if r == 6 else f"{name}s") for r, name in RANK_NAMES.items()}

WHEEL = (14, 5, 4, 3, 2)


@dataclass(frozen=True, order=True)
class HandRank:
    """
    Comparable strength of a made hand.

    Only ``strength`` takes part in comparisons (higher is better; it is
    the treys score turned around). ``tiebreak`` lists the deciding ranks
    in descending significance and ``cards`` the five cards that play.
    """
    strength: int
    category: HandCategory = field(compare=False)
    tiebreak: tuple[int, ...] = field(default=(), compare=False)
    cards: tuple[Card, ...] = field(default=(), compare=False)

    @property
    def label(self) -> str:
        return self.category.label

    def describe(self) -> str:
        """Human-readable description, e.g. 'Two Pair, Aces and Kings'."""
        t = self.tiebreak
        cat = self.category
        if cat in (HandCategory.STRAIGHT, HandCategory.STRAIGHT_FLUSH):
            if cat == HandCategory.STRAIGHT_FLUSH and t[0] == 14:
                return "Royal Flush"
            return f"{self.label}, {RANK_NAMES[t[0]]} high"
        if cat == HandCategory.FOUR_OF_A_KIND:
            return f"{self.label}, {RANK_PLURALS[t[0]]}"
        if cat == HandCategory.FULL_HOUSE:
            return f"{self.label}, {RANK_PLURALS[t[0]]} full of {RANK_PLURALS[t[1]]}"
        if cat == HandCategory.THREE_OF_A_KIND:
            return f"{self.label}, {RANK_PLURALS[t[0]]}"
        if cat == HandCategory.TWO_PAIR:
            return f"{self.label}, {RANK_PLURALS[t[0]]} and {RANK_PLURALS[t[1]]}"
        if cat == HandCategory.PAIR:
            return f"{self.label} of {RANK_PLURALS[t[0]]}"
        # High card and flush
        return f"{self.label}, {RANK_NAMES[t[0]]} high"

    def __str__(self) -> str:
        return f"{self.describe()} ({' '.join(str(c) for c in self.cards)})"

_evaluator = Evaluator()
_TREYS = {card: card.to_treys() for card in full_deck()}

# Weakest treys score; strength counts up from here
_WORST_SCORE = 7462


def to_treys(cards: Iterable[Card]) -> list[int]:
    """Convert cards to treys integers."""
    return [_TREYS[c] for c in cards]


def score(cards: list[Card]) -> int:
    """
    Raw treys score of the best five of 5-7 distinct cards.

    Lower is better (1 is a royal flush). No validation, for hot loops.
    """
    ints = to_treys(cards)
    return _evaluator.evaluate(ints[:2], ints[2:])


def _category(treys_score: int) -> HandCategory:
    # treys class 1 is a straight flush and 9 high card; some releases
    # split royal flushes off as class 0
    rank_class = max(1, _evaluator.get_rank_class(treys_score))
    return HandCategory(9 - rank_class)


def _tiebreak(category: HandCategory, five: tuple[Card, ...]) -> tuple[int, ...]:
    """Ranks that order hands within a category, most significant first."""
    ranks = sorted((c.rank for c in five), reverse=True)
    if category in (HandCategory.STRAIGHT, HandCategory.STRAIGHT_FLUSH):
        return (5,) if tuple(ranks) == WHEEL else (ranks[0],)
    # Larger groups first, then higher ranks
    groups = sorted(Counter(ranks).items(), key=lambda kv: (kv[1], kv[0]), reverse=True)
    return tuple(rank for rank, _ in groups)


def evaluate(cards: Iterable[CardLike]) -> HandRank:
    """
    Evaluate the best five-card hand among 5, 6 or 7 cards.

    Strength comes from treys. The five cards that make the hand are the
    subset with the best treys score.

    Raises:
        ValueError: If the card count is outside 5-7 or a card repeats.
    """
    parsed = parse_cards(cards)
    if not 5 <= len(parsed) <= 7:
        raise ValueError(f"Can only evaluate 5 to 7 cards, got {len(parsed)}")
    if len(set(parsed)) != len(parsed):
        raise ValueError(f"Duplicate cards detected: {' '.join(map(str, parsed))}")

    best = score(parsed)
    if len(parsed) == 5:
        five = tuple(parsed)
    else:
        five = next(c for c in combinations(parsed, 5) if score(list(c)) == best)

    category = _category(best)
    ordered = tuple(sorted(five, key=lambda c: (c.rank, c.suit), reverse=True))
    return HandRank(
        strength=_WORST_SCORE + 1 - best,
        category=category,
        tiebreak=_tiebreak(category, ordered),
        cards=ordered,
    )


def evaluate_hand(hole: Iterable[CardLike], board: Iterable[CardLike]) -> HandRank:
    """Evaluate hole cards together with the board."""
    return evaluate(parse_cards(hole) + parse_cards(board))


def compare(a: HandRank, b: HandRank) -> int:
    """Return 1 if a beats b, -1 if b beats a, 0 for a tie."""
    if a > b:
        return 1
    if a < b:
        return -1
    return 0
