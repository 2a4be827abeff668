"""Card, hole card and deck representation utilities."""

import re
from dataclasses import dataclass
from enum import IntEnum
from itertools import combinations
from typing import Iterable, Optional, Union

import numpy as np
from treys import Card as TreysCard

from equibot.errors import DeckExhausted, InvalidCardCode, UnknownCardRemoval


class Rank(IntEnum):
    """Card ranks (2-14 where 14 is Ace)."""
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14


class Suit(IntEnum):
    """Card suits."""
    CLUBS = 0
    DIAMONDS = 1
    HEARTS = 2
    SPADES = 3


# Mapping for string conversion
RANK_STR = {
    2: "2", 3: "3", 4: "4", 5: "5", 6: "6", 7: "7", 8: "8", 9: "9",
    10: "T", 11: "J", 12: "Q", 13: "K", 14: "A"
}
STR_RANK = {v: k for k, v in RANK_STR.items()}

SUIT_STR = {0: "c", 1: "d", 2: "h", 3: "s"}
STR_SUIT = {v: k for k, v in SUIT_STR.items()}

SUIT_SYMBOL = {0: "♣", 1: "♦", 2: "♥", 3: "♠"}

# Some sources encode ranks numerically ("10h", "14s")
NUMERIC_RANKS = {"10": "T", "11": "J", "12": "Q", "13": "K", "14": "A"}

CardLike = Union["Card", str]


@dataclass(frozen=True)
class Card:
    """A playing card."""
    rank: int  # 2-14
    suit: int  # 0-3

    def __str__(self) -> str:
        return f"{RANK_STR[self.rank]}{SUIT_STR[self.suit]}"

    def __repr__(self) -> str:
        return str(self)

    @property
    def symbol(self) -> str:
        """Display form with the suit glyph, e.g. 'A♠'."""
        return f"{RANK_STR[self.rank]}{SUIT_SYMBOL[self.suit]}"

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Parse card from a code like 'As', 'Th', '2c' or '10h'."""
        return parse_card(s)

    def to_treys(self) -> int:
        """Convert to treys library card format."""
        return TreysCard.new(str(self))


def parse_card(code: str) -> Card:
    """
    Parse a two-character card code.

    The rank is one of ``23456789TJQKA`` and the suit one of ``hdcs``,
    both case-sensitive. A numeric rank prefix (10-14) is normalized to
    its letter first, so ``10h`` parses as ``Th`` and ``14s`` as ``As``.

    Raises:
        InvalidCardCode: If the code is not a valid card.
    """
    if not isinstance(code, str):
        raise InvalidCardCode(f"Invalid card code: {code!r}")

    if len(code) == 3 and code[:2] in NUMERIC_RANKS:
        code = NUMERIC_RANKS[code[:2]] + code[2]

    if len(code) != 2:
        raise InvalidCardCode(f"Invalid card code: {code!r}")
    rank_char, suit_char = code[0], code[1]

    if rank_char not in STR_RANK:
        raise InvalidCardCode(f"Invalid rank in card code {code!r}: {rank_char}")
    if suit_char not in STR_SUIT:
        raise InvalidCardCode(f"Invalid suit in card code {code!r}: {suit_char}")

    return Card(rank=STR_RANK[rank_char], suit=STR_SUIT[suit_char])


def parse_cards(cards: Union[str, Iterable[CardLike], None]) -> list[Card]:
    """
    Parse a collection of cards.

    Accepts an iterable of codes or Card objects, or a single string
    such as 'AsKh', 'As Kh' or 'As,Kh'.
    """
    if cards is None:
        return []
    if isinstance(cards, str):
        tokens = cards.replace(",", " ").split()
        codes = []
        for token in tokens:
            if len(token) in (2, 3):
                codes.append(token)
            else:
                codes.extend(token[i:i + 2] for i in range(0, len(token), 2))
        return [parse_card(code) for code in codes]
    return [c if isinstance(c, Card) else parse_card(c) for c in cards]


@dataclass(frozen=True)
class HoleCards:
    """The two private cards held by one player."""
    card1: Card
    card2: Card

    def __post_init__(self):
        if self.card1 == self.card2:
            raise ValueError(f"Hole cards must be distinct: {self.card1} {self.card2}")
        # Higher card first; suit breaks rank ties
        if (self.card1.rank, self.card1.suit) < (self.card2.rank, self.card2.suit):
            first, second = self.card2, self.card1
            object.__setattr__(self, "card1", first)
            object.__setattr__(self, "card2", second)

    @property
    def cards(self) -> tuple[Card, Card]:
        return (self.card1, self.card2)

    @property
    def is_pair(self) -> bool:
        return self.card1.rank == self.card2.rank

    @property
    def is_suited(self) -> bool:
        return self.card1.suit == self.card2.suit

    @property
    def canonical(self) -> str:
        """Starting-hand notation with suits dropped: 'AKs', 'QQ', '72o'."""
        ranks = RANK_STR[self.card1.rank] + RANK_STR[self.card2.rank]
        if self.is_pair:
            return ranks
        return ranks + ("s" if self.is_suited else "o")

    def __str__(self) -> str:
        return f"{self.card1}{self.card2}"

    def __repr__(self) -> str:
        return f"HoleCards({self.card1}, {self.card2})"

    @classmethod
    def from_cards(cls, cards: Iterable[CardLike]) -> "HoleCards":
        parsed = parse_cards(cards)
        if len(parsed) != 2:
            raise ValueError(f"Hole cards must be exactly 2 cards, got {len(parsed)}")
        return cls(parsed[0], parsed[1])

    @classmethod
    def from_string(cls, s: str) -> "HoleCards":
        """Parse specific hole cards from a string like 'AsKh'."""
        return cls.from_cards(s)


def full_deck() -> list[Card]:
    """All 52 cards, suit-major then rank-minor."""
    return [
        Card(rank, suit)
        for suit in range(4)
        for rank in range(2, 15)
    ]


class Deck:
    """
    A standard 52-card deck minus any cards already seen.

    Decks are values: ``excluding`` and ``draw_random`` return new decks
    and leave the original untouched.
    """

    def __init__(self, cards: Optional[Iterable[Card]] = None):
        self.cards: tuple[Card, ...] = tuple(full_deck() if cards is None else cards)

    def excluding(self, cards: Iterable[CardLike]) -> "Deck":
        """
        Remove specific cards from the deck.

        Raises:
            UnknownCardRemoval: If a card is not in the deck. Listing the
                same card twice is reported the same way.
        """
        remaining = list(self.cards)
        present = set(remaining)
        for card in parse_cards(cards):
            if card not in present:
                raise UnknownCardRemoval(
                    f"Cannot remove {card}: not in deck of {len(self)} cards"
                )
            present.remove(card)
        return Deck(c for c in remaining if c in present)

    def draw_random(
        self,
        n: int,
        rng: np.random.Generator,
    ) -> tuple[list[Card], "Deck"]:
        """
        Draw n cards uniformly without replacement.

        Returns:
            Tuple of (drawn cards, remaining deck)
        """
        if n < 0:
            raise ValueError(f"Cannot draw a negative number of cards: {n}")
        if n > len(self.cards):
            raise DeckExhausted(f"Cannot deal {n} cards, only {len(self.cards)} remaining")
        if n == 0:
            return [], self

        picks = rng.choice(len(self.cards), size=n, replace=False)
        drawn = [self.cards[i] for i in picks]
        taken = set(int(i) for i in picks)
        remainder = Deck(c for i, c in enumerate(self.cards) if i not in taken)
        return drawn, remainder

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self):
        return iter(self.cards)

    def __contains__(self, card: object) -> bool:
        return card in self.cards

    def __repr__(self) -> str:
        return f"Deck({len(self.cards)} cards)"


def get_all_hands() -> list[str]:
    """The 169 distinct starting hands, pairs first, strongest first."""
    ranks = sorted(RANK_STR, reverse=True)
    pairs = [RANK_STR[r] * 2 for r in ranks]
    unpaired = [
        f"{RANK_STR[hi]}{RANK_STR[lo]}{kind}"
        for hi, lo in combinations(ranks, 2)
        for kind in "so"
    ]
    return pairs + unpaired


def expand_hand(hand: str) -> list[HoleCards]:
    """
    Expand a hand into every concrete combo it covers.

    Examples:
        "AsKh" -> [AsKh]
        "AA"   -> 6 combos
        "AKs"  -> 4 combos
        "AKo"  -> 12 combos
        "AK"   -> 16 combos
    """
    hand = hand.strip()
    if len(hand) == 4 and hand[1] in STR_SUIT and hand[3] in STR_SUIT:
        return [HoleCards.from_string(hand)]

    if len(hand) not in (2, 3) or hand[0] not in STR_RANK or hand[1] not in STR_RANK:
        raise ValueError(f"Invalid hand string: {hand}")

    r1 = STR_RANK[hand[0]]
    r2 = STR_RANK[hand[1]]
    kind = hand[2] if len(hand) == 3 else ""
    if kind not in ("", "s", "o"):
        raise ValueError(f"Invalid hand string: {hand}")

    if r1 == r2:
        if kind:
            raise ValueError(f"Invalid hand string: {hand}")
        return [
            HoleCards(Card(r1, s1), Card(r2, s2))
            for s1, s2 in combinations(range(4), 2)
        ]

    combos = []
    for s1 in range(4):
        for s2 in range(4):
            if kind == "s" and s1 != s2:
                continue
            if kind == "o" and s1 == s2:
                continue
            combos.append(HoleCards(Card(r1, s1), Card(r2, s2)))
    return combos


_RANKS = "23456789TJQKA"
_PAIR_SPAN = re.compile(rf"([{_RANKS}])\1-([{_RANKS}])\2")
_HAND_TOKEN = re.compile(rf"([{_RANKS}])([{_RANKS}])([so]?)(\+?)")
_COMBO_TOKEN = re.compile(rf"[{_RANKS}][cdhs][{_RANKS}][cdhs]")


def _range_token(token: str) -> list[str]:
    """Hands named by a single range component."""
    if token.lower() == "any":
        return get_all_hands()

    if _COMBO_TOKEN.fullmatch(token):
        return [token]

    match = _PAIR_SPAN.fullmatch(token)
    if match:
        low, high = sorted(STR_RANK[r] for r in match.groups())
        return [RANK_STR[r] * 2 for r in range(low, high + 1)]

    match = _HAND_TOKEN.fullmatch(token)
    if not match:
        raise ValueError(f"Invalid range component: {token!r}")

    first, second, kind, plus = match.groups()
    hi, lo = STR_RANK[first], STR_RANK[second]
    if hi == lo:
        if kind:
            raise ValueError(f"Pairs take no suit suffix: {token!r}")
        top = 14 if plus else hi
        return [RANK_STR[r] * 2 for r in range(hi, top + 1)]

    hi, lo = max(hi, lo), min(hi, lo)
    # "ATs+" climbs the kicker up to just below the top card
    kickers = range(lo, hi) if plus else [lo]
    return [f"{RANK_STR[hi]}{RANK_STR[k]}{kind}" for k in kickers]


def parse_range(range_str: str) -> list[str]:
    """
    Parse a hand range string into list of hands.

    Components are separated by commas; hands already listed are skipped.

    Examples:
        "AA" -> ["AA"]
        "TT+" -> ["TT", "JJ", "QQ", "KK", "AA"]
        "ATs+" -> ["ATs", "AJs", "AQs", "AKs"]
        "22-55" -> ["22", "33", "44", "55"]
        "QQ+, AKs" -> ["QQ", "KK", "AA", "AKs"]
        "any" -> all 169 starting hands

    Raises:
        ValueError: For a component outside this notation
    """
    hands: list[str] = []
    for token in range_str.split(","):
        token = token.strip()
        if not token:
            continue
        for hand in _range_token(token):
            if hand not in hands:
                hands.append(hand)
    return hands
