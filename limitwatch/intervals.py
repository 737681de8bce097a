"""Refresh intervals shared by the status page and the watcher CLI."""

from __future__ import annotations

from typing import Any

from limitwatch.services.normalizer import coerce_number

REFRESH_INTERVALS_MS: tuple[int, ...] = (5_000, 15_000, 30_000, 60_000, 300_000)
DEFAULT_REFRESH_MS = 30_000


def resolve_interval(value: Any, default: int = DEFAULT_REFRESH_MS) -> int:
    """Parse a user-selected interval in milliseconds.

    Any positive number is accepted, not only the documented choices;
    anything else falls back to *default*.
    """
    number = coerce_number(value)
    if number is None or number <= 0:
        return default
    return max(1, round(number))


def interval_label(interval_ms: int) -> str:
    """Describe an interval the way the page's selector does."""
    seconds = interval_ms / 1000
    if seconds >= 60 and seconds % 60 == 0:
        minutes = int(seconds // 60)
        return f"Every {minutes} minute" + ("" if minutes == 1 else "s")
    if seconds.is_integer():
        seconds = int(seconds)
    return f"Every {seconds} second" + ("" if seconds == 1 else "s")
