"""Game representation module."""

from .cards import (
    Card,
    Deck,
    HoleCards,
    Rank,
    Suit,
    expand_hand,
    full_deck,
    get_all_hands,
    parse_card,
    parse_cards,
    parse_range,
)
from .evaluator import HandCategory, HandRank, compare, evaluate, evaluate_hand
from .equity import (
    EquityCalculator,
    EquityConfig,
    EquityResult,
    OpponentMode,
    OpponentModel,
    estimate_equity,
)

__all__ = [
    "Card",
    "Deck",
    "HoleCards",
    "Rank",
    "Suit",
    "expand_hand",
    "full_deck",
    "get_all_hands",
    "parse_card",
    "parse_cards",
    "parse_range",
    "HandCategory",
    "HandRank",
    "compare",
    "evaluate",
    "evaluate_hand",
    "EquityCalculator",
    "EquityConfig",
    "EquityResult",
    "OpponentMode",
    "OpponentModel",
    "estimate_equity",
]
