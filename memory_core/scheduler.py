from __future__ import annotations

import heapq
import itertools
import logging
import threading
import time
from typing import Callable, List, Optional, Protocol, Tuple

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callback) -> None:
        ...


class CooperativeScheduler:
    """Runs deferred callbacks on the caller's thread.

    Nothing fires on its own: the host calls run_due() from its loop (the
    terminal player does this before every prompt), and tests call advance()
    to move time forward without sleeping. Callbacks fire in deadline order,
    ties in the order they were scheduled.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._offset = 0.0
        self._seq = itertools.count()
        self._queue: List[Tuple[float, int, Callback]] = []

    def now(self) -> float:
        return self._clock() + self._offset

    def call_later(self, delay: float, callback: Callback) -> None:
        if delay < 0:
            raise ValueError('delay must be non-negative')
        heapq.heappush(self._queue, (self.now() + delay, next(self._seq), callback))

    def pending(self) -> int:
        return len(self._queue)

    def next_deadline(self) -> Optional[float]:
        return self._queue[0][0] if self._queue else None

    def run_due(self) -> int:
        """Fires every callback whose deadline has passed. Returns how many ran."""
        ran = 0
        while self._queue and self._queue[0][0] <= self.now():
            _, _, callback = heapq.heappop(self._queue)
            callback()
            ran += 1
        return ran

    def advance(self, seconds: float) -> int:
        if seconds < 0:
            raise ValueError('cannot move time backwards')
        self._offset += seconds
        return self.run_due()


class ThreadingScheduler:
    """One daemon threading.Timer per call. Callers must serialize their own state."""

    def call_later(self, delay: float, callback: Callback) -> None:
        timer = threading.Timer(delay, self._run, args=(callback,))
        timer.daemon = True
        timer.start()

    @staticmethod
    def _run(callback: Callback) -> None:
        try:
            callback()
        except Exception:
            logger.exception('scheduled callback failed')
