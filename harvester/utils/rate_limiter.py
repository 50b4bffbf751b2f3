"""Rate limiter for HTTP requests."""

from __future__ import annotations

import time
from typing import Callable


class RateLimiter:
    """Minimum-spacing rate limiter.

    Each instance owns its own "time of last request", so two limiters never
    throttle each other.

    Args:
        min_interval: Minimum number of seconds between two requests.
        clock: Monotonic clock returning seconds.
        sleep: Function used to block for a number of seconds.
    """

    def __init__(
        self,
        min_interval: float = 0.5,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if min_interval < 0:
            raise ValueError(f"min_interval must be >= 0, got {min_interval}")
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_request: float | None = None

    def wait(self) -> float:
        """Block until a request is allowed. Returns the seconds slept."""
        slept = 0.0
        if self._last_request is not None:
            elapsed = self._clock() - self._last_request
            if elapsed < self.min_interval:
                slept = self.min_interval - elapsed
                self._sleep(slept)

        self._last_request = self._clock()
        return slept
