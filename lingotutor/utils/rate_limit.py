"""
Fixed-window rate limiting for the boundary around the tutoring core.

Each limiter owns its counters and takes the clock as a dependency, so it can
be swapped per process and tested without waiting on wall-clock time.
Expired windows are dropped by an explicit `sweep()`, never by a background
timer.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from ..config import RateLimitConfig, config
from ..errors import RateLimitExceededError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitStatus:
    """Outcome of one check, shaped like the usual X-RateLimit-* headers."""

    limit: int
    remaining: int
    reset_at: float
    allowed: bool
    retry_after: int = 0


@dataclass
class _Window:
    count: int
    reset_at: float


class RateLimiter:
    """
    Counts requests per key in fixed windows.

    Args:
        window_seconds: Window length
        max_requests: Requests allowed per window
        key_prefix: Namespace prepended to every key ("chat", "analysis")
        clock: Returns the current time in seconds
    """

    def __init__(
        self,
        window_seconds: float,
        max_requests: int,
        key_prefix: str = "global",
        clock: Callable[[], float] = time.monotonic,
    ):
        if window_seconds <= 0 or max_requests <= 0:
            raise ValueError("window_seconds and max_requests must be > 0")
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self.key_prefix = key_prefix
        self.clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}:{key}"

    def check(self, key: str) -> RateLimitStatus:
        """Count one request for `key` and report whether it is allowed."""
        now = self.clock()
        full_key = self._key(key)
        with self._lock:
            window = self._windows.get(full_key)
            if window is None or now > window.reset_at:
                window = _Window(count=1, reset_at=now + self.window_seconds)
                self._windows[full_key] = window
                return RateLimitStatus(
                    limit=self.max_requests,
                    remaining=self.max_requests - 1,
                    reset_at=window.reset_at,
                    allowed=True,
                )

            window.count += 1
            allowed = window.count <= self.max_requests
            return RateLimitStatus(
                limit=self.max_requests,
                remaining=max(0, self.max_requests - window.count),
                reset_at=window.reset_at,
                allowed=allowed,
                retry_after=0 if allowed else math.ceil(window.reset_at - now),
            )

    def enforce(self, key: str) -> RateLimitStatus:
        """
        Like `check`, but raises when the request is over the limit.

        Raises:
            RateLimitExceededError: With the seconds until the window resets
        """
        status = self.check(key)
        if not status.allowed:
            logger.info("Rate limit hit for %s", self._key(key))
            raise RateLimitExceededError(self._key(key), status.retry_after)
        return status

    def sweep(self) -> int:
        """Drop expired windows; returns how many were removed."""
        now = self.clock()
        with self._lock:
            expired = [k for k, w in self._windows.items() if now > w.reset_at]
            for k in expired:
                del self._windows[k]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)


def chat_rate_limiter(
    settings: RateLimitConfig | None = None, clock: Callable[[], float] = time.monotonic
) -> RateLimiter:
    settings = settings or config.rate_limit
    return RateLimiter(settings.chat_window_seconds, settings.chat_max_requests, "chat", clock)


def analysis_rate_limiter(
    settings: RateLimitConfig | None = None, clock: Callable[[], float] = time.monotonic
) -> RateLimiter:
    settings = settings or config.rate_limit
    return RateLimiter(
        settings.analysis_window_seconds, settings.analysis_max_requests, "analysis", clock
    )
