"""What a refresh cycle renders: three values and an error line."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Any, TextIO

from limitwatch.services.normalizer import coerce_number

PLACEHOLDER = "—"


def format_duration(seconds: Any) -> str:
    """Format *seconds* as ``"1h 1m 1s"``.

    Hours appear only when non-zero, minutes when non-zero or when hours
    appear; seconds always.  Negative or non-numeric input reads as zero.
    """
    total = coerce_number(seconds)
    if total is None or total < 0:
        total = 0
    if isinstance(total, float):
        # Millisecond precision, so 59.9999 seconds never prints as "60s".
        total = round(total, 3)
        if total.is_integer():
            total = int(total)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)

    parts = []
    if hours:
        parts.append(f"{int(hours)}h")
    if minutes or hours:
        parts.append(f"{int(minutes)}m")
    parts.append(f"{round(secs, 3):g}s" if isinstance(secs, float) else f"{secs}s")
    return " ".join(parts)


@dataclass
class LimitsDisplay:
    """Last rendered values plus the current error message.

    A failed cycle only sets ``error``; values from the last successful
    cycle stay in place.
    """

    limit: str = PLACEHOLDER
    remaining: str = PLACEHOLDER
    reset: str = PLACEHOLDER
    error: str = ""

    def render(self, snapshot: Any) -> None:
        self.limit = str(snapshot.limit)
        self.remaining = str(snapshot.remaining)
        self.reset = format_duration(snapshot.reset)
        self.error = ""
        self.refreshed()

    def show_error(self, reason: str) -> None:
        self.error = f"Failed to load limits. {reason}"
        self.refreshed()

    def as_text(self) -> str:
        line = (
            f"Rate Limit: {self.limit}  Remaining: {self.remaining}  "
            f"Time Left: {self.reset}"
        )
        if self.error:
            line += f"  | {self.error}"
        return line

    def refreshed(self) -> None:
        """Hook called after every render or error; no-op here."""


@dataclass
class ConsoleDisplay(LimitsDisplay):
    """Writes a line to *stream* (stdout by default) whenever the text changes."""

    stream: TextIO | None = field(default=None, repr=False)
    _last: str = field(default="", init=False, repr=False)

    def refreshed(self) -> None:
        text = self.as_text()
        if text == self._last:
            return
        self._last = text
        out = self.stream or sys.stdout
        out.write(text + "\n")
        out.flush()
