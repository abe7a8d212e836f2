"""Client identity derivation for rate limiting.

The key is best-effort and unauthenticated: forwarding headers are client
controlled unless a trusted reverse proxy overwrites them.
"""

from __future__ import annotations

import hashlib

from fastapi import Request

FORWARDED_FOR_HEADER = "x-forwarded-for"
REAL_IP_HEADER = "x-real-ip"


def _first_forwarded_address(value: str | None) -> str | None:
    """Return the left-most entry of a comma-separated forwarding chain."""
    if not value:
        return None
    first = value.split(",")[0].strip()
    return first or None


def client_key_from_request(
    request: Request,
    *,
    trust_proxy_headers: bool = True,
    fallback: str = "127.0.0.1",
) -> str:
    """Build the limiter key for the current request.

    Priority: first X-Forwarded-For entry, X-Real-IP, direct peer address,
    then ``fallback``. Proxy headers are skipped when ``trust_proxy_headers``
    is False.

    Args:
        request: Incoming request.
        trust_proxy_headers: Whether forwarding headers may be used.
        fallback: Literal key used when nothing else is available.

    Returns:
        str: Non-empty client key.

    Examples:
        >>> # X-Forwarded-For: "203.0.113.7, 10.0.0.1"  -> "203.0.113.7"
        >>> # X-Real-IP: "198.51.100.2"                 -> "198.51.100.2"
    """

    if trust_proxy_headers:
        forwarded = _first_forwarded_address(request.headers.get(FORWARDED_FOR_HEADER))
        if forwarded:
            return forwarded

        real_ip = (request.headers.get(REAL_IP_HEADER) or "").strip()
        if real_ip:
            return real_ip

    if request.client and request.client.host:
        return request.client.host

    return fallback


def hash_client_key(key: str) -> str:
    """Hash a client key for logging without exposing the address."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]
