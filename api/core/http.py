"""
Shared httpx client for upstream joke APIs.

One `httpx.AsyncClient` is built in the lifespan and reused by every provider
so connections are pooled across requests.
"""

from __future__ import annotations

import httpx

from .config import Settings


def build_async_client(
    settings: Settings,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.provider_timeout_s),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )


def body_snippet(resp: httpx.Response, limit: int = 300) -> str:
    # Avoid dumping huge bodies into errors and logs.
    return resp.text[:limit]
