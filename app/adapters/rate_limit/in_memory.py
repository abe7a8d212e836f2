"""In-memory sliding-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: a single lock guards the read-prune-decide-append sequence and
  compaction, so concurrent checks for one key can never over-admit.
- Memory is bounded by compacting idle keys once the table grows past a
  high-water mark.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitDecision

logger = logging.getLogger(__name__)


DEFAULT_COMPACTION_THRESHOLD = 10_000


def epoch_millis() -> int:
    """Return the current UNIX time in whole milliseconds."""
    return time.time_ns() // 1_000_000


class InMemorySlidingWindowRateLimiter(AbstractRateLimiter):
    """Admit at most ``limit`` events per key within a trailing window.

    Every key owns a chronological list of admission timestamps. On each check
    the list is pruned to the trailing ``window_ms``; a timestamp exactly
    ``window_ms`` old is already expired. Unlike fixed buckets, a client cannot
    burst ``2 * limit`` requests across a bucket boundary.

    Important:
        This limiter is per-process only. If the API runs with multiple workers
        (e.g., multiple Uvicorn/Gunicorn workers), each worker will enforce its
        own independent limits.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_ms: int,
        compaction_threshold: int = DEFAULT_COMPACTION_THRESHOLD,
        clock: Callable[[], int] = epoch_millis,
    ) -> None:
        """Initialize the limiter.

        Args:
            limit: Maximum number of admissions per window.
            window_ms: Length of the trailing window in milliseconds.
            compaction_threshold: Key count above which idle keys are purged.
            clock: Time source returning UNIX time in milliseconds.

        Raises:
            ValueError: If any numeric argument is below 1.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_ms < 1:
            raise ValueError("window_ms must be >= 1")
        if compaction_threshold < 1:
            raise ValueError("compaction_threshold must be >= 1")

        self._limit = limit
        self._window_ms = window_ms
        self._compaction_threshold = compaction_threshold
        self._clock = clock
        self._lock = threading.Lock()
        self._windows: dict[str, list[int]] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._windows

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_ms(self) -> int:
        return self._window_ms

    def _prune(self, timestamps: list[int], now: int) -> list[int]:
        cutoff = now - self._window_ms
        return [ts for ts in timestamps if ts > cutoff]

    def _compact(self, now: int) -> None:
        """Drop keys with no activity inside the window. Caller holds the lock."""
        keys_before = len(self._windows)
        for key in list(self._windows):
            recent = self._prune(self._windows[key], now)
            if recent:
                self._windows[key] = recent
            else:
                del self._windows[key]

        logger.info(
            "rate_limit.compacted",
            extra={
                "keys_before": keys_before,
                "keys_after": len(self._windows),
                "threshold": self._compaction_threshold,
            },
        )

    def check(self, key: str) -> RateLimitDecision:
        """Check and record one request for ``key``.

        Args:
            key: Client identity; must be non-empty.

        Returns:
            RateLimitDecision with the admission outcome.

        Raises:
            ValueError: If key is empty.
        """
        if not key:
            raise ValueError("key must be a non-empty string")

        with self._lock:
            now = self._clock()
            recent = self._prune(self._windows.get(key, []), now)

            if len(recent) >= self._limit:
                # Rejected requests are never recorded.
                retry_after = math.ceil((min(recent) + self._window_ms - now) / 1000)
                return RateLimitDecision(
                    admitted=False,
                    limit=self._limit,
                    remaining=0,
                    retry_after_seconds=max(0, retry_after),
                )

            recent.append(now)
            self._windows[key] = recent

            if len(self._windows) > self._compaction_threshold:
                self._compact(now)

            return RateLimitDecision(
                admitted=True,
                limit=self._limit,
                remaining=self._limit - len(recent),
                retry_after_seconds=0,
            )
