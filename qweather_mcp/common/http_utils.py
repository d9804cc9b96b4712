"""ABOUTME: HTTP client utilities - a single async GET attempt with no retries."""

from typing import Optional, Dict, Any
from urllib.parse import urlencode

import httpx


# Query parameters that must never reach logs or error text
REDACTED_PARAMS = frozenset({"key"})


async def http_get(
    url: str,
    headers: Optional[Dict[str, str]] = None,
    params: Optional[Dict[str, Any]] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> httpx.Response:
    """Perform one async HTTP GET and return the response whatever its status.

    Non-2xx responses are returned, not raised, so callers can inspect the body.
    Network failures propagate as httpx.HTTPError. When no client is injected a
    short-lived one is created with httpx's default timeout.
    """
    if client is not None:
        return await client.get(url, headers=headers, params=params)

    async with httpx.AsyncClient() as owned_client:
        return await owned_client.get(url, headers=headers, params=params)


def is_success(status_code: int) -> bool:
    """True for 2xx status codes."""
    return 200 <= status_code < 300


def redact_url(url: str, params: Optional[Dict[str, Any]] = None) -> str:
    """Build a loggable URL with credential parameters removed."""
    safe_params = {k: v for k, v in (params or {}).items() if k not in REDACTED_PARAMS}
    if not safe_params:
        return url
    return f"{url}?{urlencode(safe_params)}"


__all__ = [
    "http_get",
    "is_success",
    "redact_url",
]
