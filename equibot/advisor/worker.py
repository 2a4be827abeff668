"""Background equity estimation with at most one computation in flight."""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Hashable, Optional

from equibot.strategy.models import EquityReport, GameObservation

logger = logging.getLogger(__name__)

ComputeFn = Callable[[GameObservation, threading.Event], EquityReport]


class EquityWorker:
    """
    Runs equity estimates off the polling loop.

    Only the latest observation matters: submitting the key already in
    flight returns the same future, and submitting a different key sets
    the stale computation's cancel event before queueing the new one.
    The compute function is expected to check that event between trials.
    """

    def __init__(self, compute: ComputeFn):
        self._compute = compute
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="equity")
        self._lock = threading.Lock()

        self._key: Optional[Hashable] = None
        self._future: Optional[Future] = None
        self._cancel: Optional[threading.Event] = None
        self._latest: Optional[tuple[Hashable, EquityReport]] = None

    def submit(self, observation: GameObservation, key: Optional[Hashable] = None) -> Future:
        """
        Start (or join) the estimate for an observation.

        Args:
            observation: Current table observation
            key: Identity of the estimate, defaults to the observation's cards

        Returns:
            Future resolving to an EquityReport
        """
        key = observation.key if key is None else key
        with self._lock:
            if self._future is not None and self._key == key and not self._future.cancelled():
                if not self._future.done() or self._future.exception() is None:
                    return self._future

            self._cancel_current()

            cancel = threading.Event()
            self._key = key
            self._cancel = cancel
            self._future = self._executor.submit(self._run, key, observation, cancel)
            return self._future

    def latest(self, key: Hashable) -> Optional[EquityReport]:
        """Last finished report, only if it was computed for this exact key."""
        with self._lock:
            if self._latest is not None and self._latest[0] == key:
                return self._latest[1]
            return None

    def cancel(self) -> None:
        """Cancel whatever is in flight."""
        with self._lock:
            self._cancel_current()
            self._key = None
            self._future = None
            self._cancel = None

    def shutdown(self) -> None:
        self.cancel()
        self._executor.shutdown(wait=True)

    def _cancel_current(self) -> None:
        if self._cancel is not None and self._future is not None and not self._future.done():
            logger.debug(f"Cancelling stale equity estimate for {self._key}")
            self._cancel.set()
            self._future.cancel()

    def _run(
        self,
        key: Hashable,
        observation: GameObservation,
        cancel: threading.Event,
    ) -> EquityReport:
        report = self._compute(observation, cancel)
        with self._lock:
            self._latest = (key, report)
        return report

    def __enter__(self) -> "EquityWorker":
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()
