# file: courierratio/net/http.py
"""
Async HTTP client construction (httpx).

Upstream calls are single attempts: there is no retry, backoff or rate limiting
here. Callers that want to try again re-issue the request themselves.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

import httpx

DEFAULT_USER_AGENT = "courierratio/0.1"


@dataclass(frozen=True, slots=True)
class HttpClientConfig:
    timeout_seconds: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT


def make_async_client(
    config: HttpClientConfig, *, transport: httpx.AsyncBaseTransport | None = None
) -> httpx.AsyncClient:
    """
    Build an `httpx.AsyncClient`; the caller owns it and must `aclose()` it.

    `transport` lets tests plug in `httpx.MockTransport`.
    """

    return httpx.AsyncClient(
        timeout=httpx.Timeout(config.timeout_seconds),
        headers={"User-Agent": config.user_agent, "Accept": "application/json"},
        transport=transport,
        follow_redirects=True,
    )


@asynccontextmanager
async def build_async_client(
    config: HttpClientConfig, *, transport: httpx.AsyncBaseTransport | None = None
) -> AsyncIterator[httpx.AsyncClient]:
    async with make_async_client(config, transport=transport) as client:
        yield client
