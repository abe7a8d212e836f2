"""Rate limiter interfaces.

Request handlers depend on this abstraction rather than the concrete
implementation, so the in-process store can later be replaced by a shared one
(e.g., Redis) without touching the HTTP layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a single admission check.

    Attributes:
        admitted: Whether the request may proceed.
        limit: Maximum admissions per window.
        remaining: Admissions left in the trailing window (0 when rejected).
        retry_after_seconds: Seconds until a slot frees up; 0 when admitted.
    """

    admitted: bool
    limit: int
    remaining: int
    retry_after_seconds: int


class AbstractRateLimiter(ABC):
    """Interface for admission controllers."""

    @abstractmethod
    def check(self, key: str) -> RateLimitDecision:
        """Decide whether a request identified by ``key`` is admitted.

        Admitted requests are recorded against the key; rejected ones are not.

        Args:
            key: Client identity (e.g., client IP address).

        Returns:
            RateLimitDecision describing the outcome.
        """
        raise NotImplementedError
