"""
Sliding-window limiter for outbound provider calls.

One instance is shared by every ingestion worker in the process. When the
window is full, acquire() suspends the caller until a slot frees up; it
never raises.

Dependencies: pyrate_limiter
System role: Provider quota protection
"""

import asyncio
import logging

from pyrate_limiter import Limiter, Rate

logger = logging.getLogger(__name__)


class SlidingWindowRateLimiter:
    """Async wrapper over a pyrate_limiter in-memory sliding window."""

    def __init__(
        self,
        max_calls: int,
        window_seconds: float,
        name: str = "embedding-provider",
        poll_interval: float = 0.05,
    ) -> None:
        """
        Initialize the limiter.

        Args:
            max_calls: Calls allowed within any window
            window_seconds: Window length in seconds
            name: Bucket key (one logical quota per name)
            poll_interval: Sleep between acquisition attempts while saturated
        """
        if max_calls <= 0 or window_seconds <= 0:
            raise ValueError("max_calls and window_seconds must be positive")
        self._name = name
        self._poll_interval = poll_interval
        self._limiter = Limiter(
            Rate(max_calls, int(window_seconds * 1000)),
            raise_when_fail=False,
        )
        self.max_calls = max_calls
        self.window_seconds = window_seconds

    def try_acquire(self) -> bool:
        """Take a slot if one is free right now."""
        return bool(self._limiter.try_acquire(self._name))

    async def acquire(self) -> None:
        """Wait until a slot is available and take it."""
        waited = False
        while not self.try_acquire():
            if not waited:
                logger.info(
                    f"{__name__}:acquire - Rate window saturated, waiting",
                    extra={"limiter": self._name, "max_calls": self.max_calls},
                )
                waited = True
            await asyncio.sleep(self._poll_interval)
