"""FastAPI dependencies shared by the routes."""

from __future__ import annotations

from typing import AsyncIterator

import httpx


def build_upstream_client(
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Client for the upstream call; redirects are followed like a browser fetch."""
    kwargs: dict = {"follow_redirects": True}
    if transport is not None:
        kwargs["transport"] = transport
    return httpx.AsyncClient(**kwargs)


async def get_upstream_client() -> AsyncIterator[httpx.AsyncClient]:
    """Yield an HTTP client for the single upstream call of a request."""
    async with build_upstream_client() as client:
        yield client
