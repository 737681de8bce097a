"""Async and sync HTTP clients for the ``/api/limits`` endpoint."""

from __future__ import annotations

from typing import Any

import httpx

from limitwatch.api.schemas import LimitsResponse
from limitwatch.sdk.exceptions import ClientFetchError

LIMITS_PATH = "/api/limits"

# Every cycle must observe the current upstream state.
_NO_CACHE_HEADERS = {"Cache-Control": "no-cache", "Pragma": "no-cache"}


def _parse_error(response: httpx.Response) -> str | None:
    """Extract the ``error`` field from a JSON error body."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return None


def _parse_limits(response: httpx.Response) -> LimitsResponse:
    if not response.is_success:
        reason = f"HTTP {response.status_code}"
        error = _parse_error(response)
        if error:
            reason = f"{reason}: {error}"
        raise ClientFetchError(reason, response.status_code)
    try:
        return LimitsResponse.model_validate(response.json())
    except ValueError as exc:
        raise ClientFetchError(
            "Malformed response body", response.status_code
        ) from exc


def _client_kwargs(base_url: str, timeout: float, transport: Any) -> dict[str, Any]:
    kwargs: dict[str, Any] = {
        "base_url": base_url,
        "headers": _NO_CACHE_HEADERS,
        "timeout": timeout,
    }
    if transport is not None:
        kwargs["transport"] = transport
    return kwargs


def _network_reason(exc: httpx.HTTPError) -> str:
    return str(exc) or type(exc).__name__


class AsyncLimitWatchClient:
    """Async client (backed by ``httpx.AsyncClient``)."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        *,
        _transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(**_client_kwargs(base_url, timeout, _transport))

    async def __aenter__(self) -> AsyncLimitWatchClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def limits(self) -> LimitsResponse:
        """Fetch the current snapshot, raising ``ClientFetchError`` on failure."""
        try:
            resp = await self._client.get(LIMITS_PATH)
        except httpx.HTTPError as exc:
            raise ClientFetchError(_network_reason(exc)) from exc
        return _parse_limits(resp)


class LimitWatchClient:
    """Synchronous client (backed by ``httpx.Client``)."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        *,
        _transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(**_client_kwargs(base_url, timeout, _transport))

    def __enter__(self) -> LimitWatchClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def limits(self) -> LimitsResponse:
        try:
            resp = self._client.get(LIMITS_PATH)
        except httpx.HTTPError as exc:
            raise ClientFetchError(_network_reason(exc)) from exc
        return _parse_limits(resp)
