"""Caller authentication via API key.

Stands in for the session/identity collaborator: the dependency yields an
authenticated principal or rejects the request. Keys are validated against a
comma-separated list from configuration.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from typing import Annotated

from fastapi import Header

from app.core.config import settings
from app.core.errors import AuthenticationAppError, UnauthorizedAppError

logger = logging.getLogger(__name__)

ANONYMOUS_PRINCIPAL_ID = "anonymous"


@dataclass(frozen=True)
class Principal:
    """Authenticated caller.

    Attributes:
        id: Stable, non-secret identifier (hash prefix of the API key).
    """

    id: str


def _key_fingerprint(api_key: str) -> str:
    return hashlib.sha256(api_key.encode()).hexdigest()[:16]


def parse_api_keys(keys_string: str | None) -> set[str]:
    """Parse comma-separated API keys into a set.

    Examples:
        >>> parse_api_keys("key1, key2 , key3 ")
        {'key1', 'key2', 'key3'}
        >>> parse_api_keys(None)
        set()
    """
    if not keys_string:
        return set()

    return {key.strip() for key in keys_string.split(",") if key.strip()}


def validate_api_key(provided_key: str) -> Principal:
    """Resolve the principal for ``provided_key``.

    Args:
        provided_key: API key to validate.

    Returns:
        Principal: The authenticated caller (anonymous when auth is disabled).

    Raises:
        AuthenticationAppError: If the key is unknown or no keys are configured.
    """
    if not settings.app.api_key_required:
        return Principal(id=ANONYMOUS_PRINCIPAL_ID)

    valid_keys = parse_api_keys(settings.app.api_keys)

    if not valid_keys:
        logger.error(
            "auth.misconfigured",
            extra={"reason": "api_keys_not_configured"},
        )
        raise AuthenticationAppError(
            code="api_keys_not_configured",
            message="API key authentication is enabled but no valid keys are configured",
            details={"hint": "Set APP_API_KEYS or disable auth with APP_API_KEY_REQUIRED=false"},
        )

    if provided_key not in valid_keys:
        logger.warning(
            "auth.invalid_key",
            extra={"api_key_hash": _key_fingerprint(provided_key)},
        )
        raise AuthenticationAppError(
            code="invalid_api_key",
            message="Invalid or missing API key",
        )

    return Principal(id=_key_fingerprint(provided_key))


async def require_principal(
    x_api_key: Annotated[str | None, Header(alias="X-API-Key")] = None,
) -> Principal:
    """FastAPI dependency returning the authenticated caller.

    Usage:
        @router.get("/protected")
        async def protected(principal: Principal = Depends(require_principal)):
            ...

    Raises:
        UnauthorizedAppError: 401 when the header is missing.
        AuthenticationAppError: 403 when the key is invalid or none are configured.
    """
    if not settings.app.api_key_required:
        return Principal(id=ANONYMOUS_PRINCIPAL_ID)

    if not x_api_key:
        logger.warning("auth.missing_key")
        raise UnauthorizedAppError(
            code="missing_api_key",
            message="Unauthorized. Provide X-API-Key header.",
        )

    principal = validate_api_key(x_api_key)
    logger.debug("auth.success", extra={"principal_id": principal.id})
    return principal
