from __future__ import annotations

import logging
import time
from typing import Callable

LOG = logging.getLogger(__name__)

DEFAULT_DELAY_SECONDS = 6.0


class RateLimiter:
    """Pause between consecutive requests to the same remote service."""

    def wait(self) -> None:
        raise NotImplementedError


class FixedDelayRateLimiter(RateLimiter):
    def __init__(
        self,
        delay_seconds: float = DEFAULT_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        self.delay_seconds = delay_seconds
        self._sleep = sleep

    def wait(self) -> None:
        if self.delay_seconds:
            LOG.debug("waiting %.1fs before next request", self.delay_seconds)
            self._sleep(self.delay_seconds)


class NoDelayRateLimiter(RateLimiter):
    def wait(self) -> None:
        return None
