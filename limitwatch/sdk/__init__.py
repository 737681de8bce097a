"""LimitWatch Python SDK: client, display and refresh controller for ``/api/limits``."""

from __future__ import annotations

from limitwatch.sdk.client import AsyncLimitWatchClient, LimitWatchClient
from limitwatch.sdk.display import ConsoleDisplay, LimitsDisplay, format_duration
from limitwatch.sdk.exceptions import ClientFetchError
from limitwatch.sdk.refresh import (
    Active,
    AsyncioScheduler,
    Idle,
    RefreshController,
    RefreshState,
)

__all__ = [
    "AsyncLimitWatchClient",
    "LimitWatchClient",
    "ClientFetchError",
    "LimitsDisplay",
    "ConsoleDisplay",
    "format_duration",
    "RefreshController",
    "RefreshState",
    "Idle",
    "Active",
    "AsyncioScheduler",
]
