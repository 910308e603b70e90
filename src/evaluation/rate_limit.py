"""
Pacing between consecutive model calls.

The runner calls ``wait()`` after a case is fully processed and before the
next one starts, never after the last case.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from .config import INTER_CASE_DELAY_SECONDS

logger = logging.getLogger(__name__)


class NullRateLimiter:
    """No pause; for tests and for invokers that pace themselves."""

    def wait(self) -> None:
        return None


class FixedDelayRateLimiter:
    """
    Sleep a fixed number of seconds per ``wait()``.

    Args:
        seconds: Delay per call; 0 disables pausing.
        sleep: Injected for tests; defaults to ``time.sleep``.
    """

    def __init__(
        self,
        seconds: float = INTER_CASE_DELAY_SECONDS,
        sleep: Callable[[float], None] | None = None,
    ):
        if seconds < 0:
            raise ValueError(f"Delay must be non-negative, got {seconds}")
        self.seconds = seconds
        self.sleep = sleep if sleep is not None else time.sleep

    def wait(self) -> None:
        if self.seconds:
            logger.debug("Pausing %.2fs before next case", self.seconds)
            self.sleep(self.seconds)
