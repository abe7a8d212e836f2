"""Application factory for FastAPI app.

Centralizes app construction (state, middleware, handlers, routers) so each
call yields an independent app with its own limiter and repository.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.adapters.users.base import AbstractUserRepository
from app.adapters.users.in_memory import InMemoryUserRepository
from app.api.routes import health_router, users_router
from app.core.config import settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.openapi import apply_openapi_customizations
from app.core.rate_limit import build_rate_limiter

logger = logging.getLogger(__name__)


def create_app(
    *,
    rate_limiter: AbstractRateLimiter | None = None,
    user_repository: AbstractUserRepository | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        rate_limiter: Limiter to use; built from settings when omitted.
        user_repository: Repository to use; in-memory when omitted.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Sliding Window API",
        description=(
            "User API guarded by a per-client sliding-window rate limiter. "
            "Requests over budget get HTTP 429 with a Retry-After header."
        ),
        version="0.1.0",
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
    )

    app.state.rate_limiter = rate_limiter if rate_limiter is not None else build_rate_limiter(settings.app)
    app.state.user_repository = user_repository if user_repository is not None else InMemoryUserRepository()

    app.middleware("http")(request_id_middleware)
    setup_exception_handlers(app)

    app.include_router(users_router, prefix="/v1")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    logger.info(
        "app.created",
        extra={
            "app_env": settings.app_env,
            "rate_limit_enabled": settings.app.rate_limit_enabled,
            "rate_limit_max_requests": settings.app.rate_limit_max_requests,
            "rate_limit_window_ms": settings.app.rate_limit_window_ms,
        },
    )
    return app
