"""Rate limiting dependency for FastAPI routes.

This module wires the rate limiting adapter into the HTTP layer.

Design goals:
- Minimal coupling: API routes depend on a dependency function only.
- Swap-friendly: storage backend can be replaced (e.g., Redis) behind an
  abstract interface.
- Explicit ownership: the limiter is built by the app factory and lives on
  ``app.state``, so every app instance (and every test) gets its own store.

Rate limiting strategy:
- Sliding window per client key derived from the request origin.
- Rejections surface as RateLimitAppError, mapped to HTTP 429 by the global
  exception handlers.
"""

from __future__ import annotations

import logging

from fastapi import Request, Response

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from app.core.client_key import client_key_from_request, hash_client_key
from app.core.config import AppSettings, settings
from app.core.errors import RateLimitAppError

logger = logging.getLogger(__name__)


def build_rate_limiter(app_settings: AppSettings | None = None) -> AbstractRateLimiter:
    """Create a limiter from configuration.

    Args:
        app_settings: Optional settings; defaults to the global settings.

    Returns:
        AbstractRateLimiter: Fresh limiter with an empty store.
    """

    cfg = app_settings or settings.app
    return InMemorySlidingWindowRateLimiter(
        limit=cfg.rate_limit_max_requests,
        window_ms=cfg.rate_limit_window_ms,
        compaction_threshold=cfg.rate_limit_compaction_threshold,
    )


def get_rate_limiter(request: Request) -> AbstractRateLimiter:
    """Return the limiter owned by the application serving ``request``."""

    return request.app.state.rate_limiter


async def enforce_rate_limit(request: Request, response: Response) -> None:
    """FastAPI dependency enforcing rate limits.

    When enabled, records one request against the caller's window. Admitted
    requests get X-RateLimit-* headers (if configured); rejected ones raise.

    Args:
        request: FastAPI request.
        response: Response whose headers are merged into the final response.

    Raises:
        RateLimitAppError: When the caller exceeded its budget (HTTP 429).
    """

    if not settings.app.rate_limit_enabled:
        return

    limiter = get_rate_limiter(request)
    key = client_key_from_request(
        request,
        trust_proxy_headers=settings.app.rate_limit_trust_proxy_headers,
        fallback=settings.app.rate_limit_fallback_key,
    )
    key_hash = hash_client_key(key)

    decision = limiter.check(key)
    if decision.admitted:
        logger.debug(
            "rate_limit.allowed",
            extra={
                "key_hash": key_hash,
                "limit": decision.limit,
                "remaining": decision.remaining,
            },
        )
        if settings.app.rate_limit_include_headers:
            response.headers["X-RateLimit-Limit"] = str(decision.limit)
            response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
        return

    logger.warning(
        "rate_limit.exceeded",
        extra={
            "key_hash": key_hash,
            "limit": decision.limit,
            "window_ms": settings.app.rate_limit_window_ms,
            "retry_after_s": decision.retry_after_seconds,
            "path": request.url.path,
        },
    )

    raise RateLimitAppError(
        code="rate_limited",
        message="Too many requests. Try again later.",
        details={
            "retry_after": decision.retry_after_seconds,
            "limit": decision.limit,
        },
        retry_after_seconds=decision.retry_after_seconds,
        limit=decision.limit,
        remaining=decision.remaining,
    )
