"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Fields are optional; include only what helps the caller act on the error.
    """

    hint: str
    field: str
    limit: int
    remaining: int
    retry_after: int
    resource: str
    resource_id: str
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class UnauthorizedAppError(AppError):
    """Raised when no credentials were presented."""


class AuthenticationAppError(AppError):
    """Raised when authentication/authorization fails."""


class NotFoundAppError(AppError):
    """Raised when a requested resource does not exist."""


class ConflictAppError(AppError):
    """Raised when a write would violate a uniqueness constraint."""


@dataclass
class RateLimitAppError(AppError):
    """Raised when a client exceeds its request budget.

    Attributes:
        retry_after_seconds: Seconds the client should wait before retrying.
        limit: Maximum admissions per window.
        remaining: Admissions left (always 0 when raised).
    """

    retry_after_seconds: int = 0
    limit: int = 0
    remaining: int = 0
