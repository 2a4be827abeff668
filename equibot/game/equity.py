"""Equity calculation utilities."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum, auto
from itertools import combinations
from math import comb
from typing import Callable, Iterable, Iterator, Optional, Union

import numpy as np

from equibot.errors import (
    EstimateCancelled,
    InsufficientHoleCards,
    InvalidBoardLength,
)
from .cards import Card, CardLike, Deck, HoleCards, expand_hand, parse_cards, parse_range
from .evaluator import score

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, float], None]


@dataclass
class EquityConfig:
    """Configuration for equity estimation."""
    random_trials: int = 10000     # Trials against a random opponent
    specific_trials: int = 1000    # Trials against known opponent cards
    range_trials: int = 5000       # Trials against an opponent range
    exact_when_possible: bool = True  # Enumerate when completions fit the budget
    workers: int = 1               # Threads sampling in parallel
    progress_interval: int = 500   # Trials between progress callbacks


class OpponentMode(Enum):
    """How the opponent's hole cards are modelled."""
    RANDOM = auto()
    SPECIFIC = auto()
    RANGE = auto()


@dataclass(frozen=True)
class OpponentModel:
    """
    The opponent's holding.

    RANDOM deals any two unseen cards, SPECIFIC uses known cards and
    RANGE picks uniformly among the combos of a hand range.
    """
    mode: OpponentMode = OpponentMode.RANDOM
    hand: Optional[HoleCards] = None
    combos: tuple[HoleCards, ...] = ()
    label: str = "random"

    @classmethod
    def random(cls) -> "OpponentModel":
        return cls()

    @classmethod
    def specific(cls, cards: Union[str, Iterable[CardLike], HoleCards]) -> "OpponentModel":
        hand = cards if isinstance(cards, HoleCards) else HoleCards.from_cards(cards)
        return cls(OpponentMode.SPECIFIC, hand=hand, label=str(hand))

    @classmethod
    def from_range(cls, range_str: str) -> "OpponentModel":
        """Build a range model from notation like 'TT+, AQs+, KQo'."""
        combos = []
        seen = set()
        for hand in parse_range(range_str):
            for combo in expand_hand(hand):
                if combo not in seen:
                    seen.add(combo)
                    combos.append(combo)
        if not combos:
            raise ValueError(f"Empty range: {range_str!r}")
        return cls(OpponentMode.RANGE, combos=tuple(combos), label=range_str.strip())

    @classmethod
    def coerce(cls, value) -> "OpponentModel":
        """Accept None/'random', an OpponentModel, or specific cards."""
        if value is None or (isinstance(value, str) and value.strip().lower() == "random"):
            return cls.random()
        if isinstance(value, OpponentModel):
            return value
        return cls.specific(value)

    @property
    def known_cards(self) -> list[Card]:
        return list(self.hand.cards) if self.hand is not None else []


@dataclass
class EquityResult:
    """Win/tie/loss counts from a batch of trials."""
    wins: int = 0
    ties: int = 0
    losses: int = 0
    exact: bool = False

    @property
    def trials(self) -> int:
        return self.wins + self.ties + self.losses

    @property
    def equity(self) -> float:
        """Expected share of the pot (ties count half)."""
        if self.trials == 0:
            return 0.0
        return (self.wins + 0.5 * self.ties) / self.trials

    def record(self, outcome: int) -> None:
        if outcome > 0:
            self.wins += 1
        elif outcome < 0:
            self.losses += 1
        else:
            self.ties += 1

    def __add__(self, other: "EquityResult") -> "EquityResult":
        return EquityResult(
            wins=self.wins + other.wins,
            ties=self.ties + other.ties,
            losses=self.losses + other.losses,
            exact=self.exact and other.exact,
        )


@dataclass
class _Spot:
    """Validated inputs shared by every trial of one estimate."""
    hero: list[Card]
    board: list[Card]
    opponent: OpponentModel
    deck: Deck
    range_combos: list[HoleCards] = field(default_factory=list)

    @property
    def cards_needed(self) -> int:
        return 5 - len(self.board)


class EquityCalculator:
    """
    Monte Carlo equity estimation.

    Each trial deals the opponent's hand (unless known) and completes the
    board from the unseen cards, then compares the best hands. When the
    number of possible completions fits in the trial budget they are
    enumerated exactly instead.
    """

    def __init__(
        self,
        config: Optional[EquityConfig] = None,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
    ):
        """
        Initialize the calculator.

        Args:
            config: Trial budgets and execution settings
            rng: Random generator to draw from (takes precedence over seed)
            seed: Seed for a fresh generator
        """
        self.config = config or EquityConfig()
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def estimate(
        self,
        player: Iterable[CardLike],
        board: Iterable[CardLike] = (),
        opponent=None,
        trials: Optional[int] = None,
        cancel: Optional[threading.Event] = None,
        callback: Optional[ProgressCallback] = None,
    ) -> EquityResult:
        """
        Estimate the player's equity.

        Args:
            player: Player's hole cards
            board: Board cards (0-5)
            opponent: OpponentModel, specific cards, or None for random
            trials: Trial budget (defaults by opponent mode)
            cancel: Event checked between trials
            callback: Called with (trials_done, equity_so_far)

        Returns:
            EquityResult with the aggregated counts

        Raises:
            InsufficientHoleCards: Fewer than 2 player cards
            InvalidBoardLength: More than 5 board cards
            UnknownCardRemoval: A known card is listed twice
            EstimateCancelled: The cancel event was set
        """
        spot = self._prepare(player, board, OpponentModel.coerce(opponent))
        budget = trials if trials is not None else self.default_trials(spot.opponent)
        if budget <= 0:
            raise ValueError(f"Trial count must be positive, got {budget}")

        possible = self._possible_completions(spot)
        exact = self.config.exact_when_possible and possible <= budget

        logger.debug(
            f"Equity {' '.join(map(str, spot.hero))} | board "
            f"[{' '.join(map(str, spot.board))}] vs {spot.opponent.label}: "
            f"{possible if exact else budget} {'exact' if exact else 'sampled'} trials"
        )

        if exact:
            result = self._enumerate(spot, cancel)
        else:
            result = self._sample(spot, budget, cancel, callback)

        if callback is not None:
            callback(result.trials, result.equity)
        return result

    def default_trials(self, opponent: OpponentModel) -> int:
        if opponent.mode == OpponentMode.SPECIFIC:
            return self.config.specific_trials
        if opponent.mode == OpponentMode.RANGE:
            return self.config.range_trials
        return self.config.random_trials

    def _prepare(
        self,
        player: Iterable[CardLike],
        board: Iterable[CardLike],
        opponent: OpponentModel,
    ) -> _Spot:
        hero = parse_cards(player)
        bd = parse_cards(board)

        if len(hero) < 2:
            raise InsufficientHoleCards(f"Player must have 2 hole cards, got {len(hero)}")
        if len(hero) > 2:
            raise ValueError(f"Player must have exactly 2 hole cards, got {len(hero)}")
        if len(bd) > 5:
            raise InvalidBoardLength(f"Board can have at most 5 cards, got {len(bd)}")

        # Specific opponent cards come out of the deck up front
        deck = Deck().excluding(hero + bd + opponent.known_cards)

        range_combos = []
        if opponent.mode == OpponentMode.RANGE:
            range_combos = [
                combo for combo in opponent.combos
                if combo.card1 in deck and combo.card2 in deck
            ]
            if not range_combos:
                raise ValueError(
                    f"No combos in range {opponent.label!r} are possible with known cards"
                )

        return _Spot(hero, bd, opponent, deck, range_combos)

    def _possible_completions(self, spot: _Spot) -> int:
        n = len(spot.deck)
        needed = spot.cards_needed
        if spot.opponent.mode == OpponentMode.SPECIFIC:
            return comb(n, needed)
        if spot.opponent.mode == OpponentMode.RANGE:
            return len(spot.range_combos) * comb(n - 2, needed)
        return comb(n, 2) * comb(n - 2, needed)

    def _showdown(self, hero: list[Card], villain: list[Card], board: list[Card]) -> int:
        # treys: lower is better
        ours = score(hero + board)
        theirs = score(villain + board)
        return (ours < theirs) - (ours > theirs)

    def _opponent_holdings(self, spot: _Spot) -> Iterator[tuple[list[Card], Deck]]:
        """Every opponent holding with the deck left after it."""
        if spot.opponent.mode == OpponentMode.SPECIFIC:
            yield spot.opponent.known_cards, spot.deck
        elif spot.opponent.mode == OpponentMode.RANGE:
            for combo in spot.range_combos:
                yield list(combo.cards), spot.deck.excluding(combo.cards)
        else:
            for pair in combinations(spot.deck.cards, 2):
                yield list(pair), spot.deck.excluding(pair)

    def _enumerate(self, spot: _Spot, cancel: Optional[threading.Event]) -> EquityResult:
        result = EquityResult(exact=True)
        for villain, rest in self._opponent_holdings(spot):
            for runout in combinations(rest.cards, spot.cards_needed):
                if cancel is not None and cancel.is_set():
                    raise EstimateCancelled("Equity enumeration cancelled")
                result.record(self._showdown(spot.hero, villain, spot.board + list(runout)))
        return result

    def _deal_trial(self, spot: _Spot, rng: np.random.Generator) -> tuple[list[Card], list[Card]]:
        """Deal the opponent's hand and the rest of the board for one trial."""
        deck = spot.deck
        if spot.opponent.mode == OpponentMode.SPECIFIC:
            villain = spot.opponent.known_cards
        elif spot.opponent.mode == OpponentMode.RANGE:
            combo = spot.range_combos[int(rng.integers(len(spot.range_combos)))]
            villain = list(combo.cards)
            deck = deck.excluding(villain)
        else:
            villain, deck = deck.draw_random(2, rng)

        runout, _ = deck.draw_random(spot.cards_needed, rng)
        return villain, spot.board + runout

    def _sample_batch(
        self,
        spot: _Spot,
        trials: int,
        rng: np.random.Generator,
        cancel: Optional[threading.Event],
        callback: Optional[ProgressCallback],
    ) -> EquityResult:
        result = EquityResult()
        interval = max(1, self.config.progress_interval)
        for i in range(trials):
            if cancel is not None and cancel.is_set():
                raise EstimateCancelled(f"Equity simulation cancelled after {i} trials")
            villain, full_board = self._deal_trial(spot, rng)
            result.record(self._showdown(spot.hero, villain, full_board))
            if callback is not None and (i + 1) % interval == 0:
                callback(i + 1, result.equity)
        return result

    def _sample(
        self,
        spot: _Spot,
        trials: int,
        cancel: Optional[threading.Event],
        callback: Optional[ProgressCallback],
    ) -> EquityResult:
        workers = max(1, min(self.config.workers, trials))
        if workers == 1:
            return self._sample_batch(spot, trials, self.rng, cancel, callback)

        # Independent streams per worker, derived from our own generator
        seeds = self.rng.integers(0, 2**63 - 1, size=workers)
        shares = [trials // workers + (1 if i < trials % workers else 0) for i in range(workers)]

        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [
                pool.submit(
                    self._sample_batch, spot, share,
                    np.random.default_rng(int(seed)), cancel, None,
                )
                for seed, share in zip(seeds, shares)
            ]
            partials = [f.result() for f in futures]

        return sum(partials, EquityResult())


def estimate_equity(
    player: Iterable[CardLike],
    board: Iterable[CardLike] = (),
    opponent=None,
    trials: Optional[int] = None,
    seed: Optional[int] = None,
    config: Optional[EquityConfig] = None,
) -> float:
    """
    Calculate the player's equity against one opponent.

    Args:
        player: Player's hole cards
        board: Board cards (0-5)
        opponent: None/'random', specific cards, or an OpponentModel
        trials: Trial budget (defaults by opponent mode)
        seed: Seed for reproducible results
        config: Estimation settings

    Returns:
        Equity (0-1)
    """
    calculator = EquityCalculator(config=config, seed=seed)
    return calculator.estimate(player, board, opponent=opponent, trials=trials).equity
