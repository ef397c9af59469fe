"""OpenAPI customization utilities.

Adds tags metadata and documents the rate limit response headers on the
case submission operation. Keeps documentation concerns out of the app
factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

RATE_LIMITED_PATH = "/api/public/cases/submit"

_RATE_LIMIT_HEADERS = {
    "X-RateLimit-Limit": "Submissions allowed per window.",
    "X-RateLimit-Remaining": "Submissions left in the current window.",
    "X-RateLimit-Reset": "Epoch milliseconds at which the current window ends.",
}


def _header_docs(include_retry_after: bool) -> Dict[str, Any]:
    headers = {
        name: {"description": text, "schema": {"type": "integer"}}
        for name, text in _RATE_LIMIT_HEADERS.items()
    }
    if include_retry_after:
        headers["Retry-After"] = {
            "description": "Seconds to wait before submitting again.",
            "schema": {"type": "integer"},
        }
    return headers


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation with tags and rate limit headers."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        desired_tags = [
            {"name": "Cases", "description": "Public, rate-limited case submission."},
            {"name": "Reports", "description": "Report submission and tracking relayed to the dashboard."},
            {"name": "Forms", "description": "Per-company form configuration."},
            {"name": "Health", "description": "Liveness and readiness checks."},
        ]
        for tag in desired_tags:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        operation = schema.get("paths", {}).get(RATE_LIMITED_PATH, {}).get("post")
        if isinstance(operation, dict):
            responses = operation.setdefault("responses", {})
            for code, include_retry_after in (("201", False), ("429", True)):
                response = responses.setdefault(code, {"description": ""})
                response.setdefault("headers", {}).update(_header_docs(include_retry_after))

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
