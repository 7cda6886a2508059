"""Minimum-interval gate between outgoing requests."""

import time
from typing import Callable, Optional


class RateLimiter:
    """
    Enforces at least ``interval_ms`` between consecutive ``wait()`` returns.

    One instance per crawl session; the interval can only grow.
    """

    def __init__(self, requests_per_second: float,
                 clock: Optional[Callable[[], float]] = None,
                 sleep: Optional[Callable[[float], None]] = None):
        self.interval_ms = 1000.0 / requests_per_second
        self._clock = clock or time.monotonic
        self._sleep = sleep or time.sleep
        self._last: Optional[float] = None

    def wait(self) -> None:
        if self._last is not None:
            elapsed_ms = (self._clock() - self._last) * 1000.0
            if elapsed_ms < self.interval_ms:
                self._sleep((self.interval_ms - elapsed_ms) / 1000.0)
        self._last = self._clock()

    def tighten_interval(self, candidate_ms: float) -> None:
        """Raise the interval to ``candidate_ms`` if it is longer."""
        if candidate_ms > self.interval_ms:
            self.interval_ms = candidate_ms
