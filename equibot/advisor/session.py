"""Turns table observations into equity reports and decisions."""

import logging
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Callable, Optional

import numpy as np

from equibot.errors import InsufficientHoleCards, InvariantViolation
from equibot.game.cards import HoleCards, parse_cards
from equibot.game.equity import EquityCalculator, EquityConfig, OpponentModel, ProgressCallback
from equibot.game.evaluator import evaluate
from equibot.strategy.models import (
    ActionDecision,
    ActionKind,
    EquityReport,
    GameObservation,
)
from equibot.strategy.policy import PolicyConfig, decide
from .worker import EquityWorker

logger = logging.getLogger(__name__)

NO_ESTIMATE = "No estimate available"


@dataclass
class AdvisorConfig:
    """Settings for one advisor session."""
    enabled: bool = True           # Compute equity at all
    auto_play: bool = True         # Produce actions, not just reports
    action_cooldown: float = 2.0   # Seconds between committed decisions
    equity: EquityConfig = field(default_factory=EquityConfig)
    policy: PolicyConfig = field(default_factory=PolicyConfig)


class ActionThrottle:
    """Enforces a minimum interval between committed decisions."""

    def __init__(self, cooldown: float = 2.0, clock: Callable[[], float] = time.monotonic):
        self.cooldown = cooldown
        self._clock = clock
        self._last: Optional[float] = None

    def remaining(self) -> float:
        """Seconds left before the next decision may be committed."""
        if self._last is None:
            return 0.0
        return max(0.0, self.cooldown - (self._clock() - self._last))

    def ready(self) -> bool:
        return self.remaining() <= 0.0

    def commit(self) -> None:
        self._last = self._clock()

    def reset(self) -> None:
        self._last = None


def describe_hand(hole: list, board: list) -> str:
    """Best made hand once five cards are known, else the starting hand."""
    if len(hole) < 2:
        return "Waiting for hole cards"
    if len(hole) + len(board) >= 5:
        return evaluate(hole + board).describe()
    return HoleCards.from_cards(hole).canonical


class Advisor:
    """
    Equity and decision advisor for one table.

    Wraps the calculator and the decision policy. Library errors are
    contained here: a missing or broken estimate becomes a report with
    no equity, and the policy falls back to its conservative default.
    """

    def __init__(
        self,
        config: Optional[AdvisorConfig] = None,
        opponent=None,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the advisor.

        Args:
            config: Session settings
            opponent: OpponentModel, specific cards, or None for random
            rng: Random generator for the simulator
            seed: Seed used when no generator is given
            clock: Time source for the action cooldown
        """
        self.config = config or AdvisorConfig()
        self.opponent = OpponentModel.coerce(opponent)
        self.calculator = EquityCalculator(self.config.equity, rng=rng, seed=seed)
        # Background estimates draw from their own child stream
        self._background = EquityCalculator(
            self.config.equity, rng=self.calculator.rng.spawn(1)[0],
        )
        self.throttle = ActionThrottle(self.config.action_cooldown, clock)
        self._worker: Optional[EquityWorker] = None

    def key(self, observation: GameObservation) -> tuple:
        """Identity of an estimate: the known cards plus the opponent model."""
        return observation.key + (self.opponent.label,)

    def report(
        self,
        observation: GameObservation,
        cancel: Optional[threading.Event] = None,
        callback: Optional[ProgressCallback] = None,
    ) -> EquityReport:
        """
        Estimate equity for an observation.

        Never raises for bad or incomplete input; those produce a report
        with ``equity=None``. Only cancellation propagates.
        """
        return self._report(self.calculator, observation, cancel, callback)

    def _report(
        self,
        calculator: EquityCalculator,
        observation: GameObservation,
        cancel: Optional[threading.Event],
        callback: Optional[ProgressCallback],
    ) -> EquityReport:
        if not self.config.enabled:
            return EquityReport(equity=None, hand_description="Equity calculator disabled")

        context = (
            f"hole=[{' '.join(observation.hole_cards)}] "
            f"board=[{' '.join(observation.board_cards)}] "
            f"opponent={self.opponent.label}"
        )
        try:
            hole = parse_cards(observation.hole_cards)
            board = parse_cards(observation.board_cards)
            result = calculator.estimate(
                hole, board, opponent=self.opponent, cancel=cancel, callback=callback,
            )
            description = describe_hand(hole, board)
        except InsufficientHoleCards as e:
            logger.info(f"{NO_ESTIMATE}: {e}")
            return EquityReport(equity=None, hand_description=NO_ESTIMATE)
        except InvariantViolation:
            logger.exception(f"Equity estimate aborted ({context})")
            return EquityReport(equity=None, hand_description=NO_ESTIMATE)
        except ValueError as e:
            logger.warning(f"Invalid observation ({context}): {e}")
            return EquityReport(equity=None, hand_description=NO_ESTIMATE)

        logger.debug(f"Equity {result.equity:.1%} over {result.trials} trials ({context})")
        return EquityReport(
            equity=result.equity,
            hand_description=description,
            trials_run=result.trials,
            exact=result.exact,
        )

    def decide(self, observation: GameObservation, report: EquityReport) -> ActionDecision:
        """
        Decide what to do with a report, honoring auto-play and the cooldown.

        A non-wait decision starts the cooldown.
        """
        if not self.config.auto_play:
            return ActionDecision(ActionKind.WAIT, "Auto-play disabled")
        if not observation.available_actions:
            return ActionDecision(ActionKind.WAIT, "No actions available")
        if not self.throttle.ready():
            return ActionDecision(
                ActionKind.WAIT,
                f"Cooling down ({self.throttle.remaining():.1f}s left)",
            )

        decision = decide(
            report.equity,
            observation.available_actions,
            observation.decide_pot(),
            self.config.policy,
        )
        if decision.kind != ActionKind.WAIT:
            self.throttle.commit()
        logger.info(f"Decision: {decision}")
        return decision

    def advise(self, observation: GameObservation) -> tuple[EquityReport, ActionDecision]:
        """Report and decision for an observation, computed synchronously."""
        report = self.report(observation)
        return report, self.decide(observation, report)

    def submit(self, observation: GameObservation) -> Future:
        """Estimate in the background; see EquityWorker for in-flight rules."""
        if self._worker is None:
            self._worker = EquityWorker(
                lambda obs, cancel: self._report(self._background, obs, cancel, None)
            )
        return self._worker.submit(observation, key=self.key(observation))

    def latest(self, observation: GameObservation) -> Optional[EquityReport]:
        """Last background report for exactly this observation's cards."""
        if self._worker is None:
            return None
        return self._worker.latest(self.key(observation))

    def close(self) -> None:
        if self._worker is not None:
            self._worker.shutdown()
            self._worker = None

    def __enter__(self) -> "Advisor":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
