"""OpenAPI customization.

Adds the ``X-API-Key`` security scheme and tag descriptions, documents the
429 response on rate-limited operations, and exempts health endpoints from
auth in the generated schema.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

_TAGS = [
    {"name": "Users", "description": "User lookup and creation (rate limited)."},
    {"name": "Health", "description": "Liveness checks."},
]

_TOO_MANY_REQUESTS = {
    "description": "Rate limit exceeded; wait Retry-After seconds.",
    "headers": {
        "Retry-After": {
            "description": "Seconds until the oldest request leaves the window.",
            "schema": {"type": "integer"},
        },
    },
}


def apply_openapi_customizations(app: FastAPI) -> None:
    """Wrap ``app.openapi`` so the generated schema carries our metadata."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        components = schema.setdefault("components", {})
        components.setdefault("securitySchemes", {}).setdefault(
            "ApiKeyAuth",
            {
                "type": "apiKey",
                "in": "header",
                "name": "X-API-Key",
                "description": "Provide your API key via the X-API-Key header.",
            },
        )
        schema.setdefault("security", [{"ApiKeyAuth": []}])

        tags = schema.setdefault("tags", [])
        existing = {t.get("name") for t in tags}
        tags.extend(tag for tag in _TAGS if tag["name"] not in existing)

        for path, methods in schema.get("paths", {}).items():
            for operation in methods.values():
                if not isinstance(operation, dict):
                    continue
                if path.endswith("/health"):
                    operation["security"] = []
                elif "Users" in operation.get("tags", []):
                    operation.setdefault("responses", {}).setdefault("429", _TOO_MANY_REQUESTS)

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
