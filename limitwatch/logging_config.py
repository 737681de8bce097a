"""Log formatters for the proxy and the watcher.

Both formatters mask the upstream credential: ``extra`` fields whose name is
listed in ``settings.log_redacted_fields`` are replaced, and the configured
``upstream_api_key`` is cut out of rendered messages.
"""

from __future__ import annotations

import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from typing import Any

from limitwatch.config import settings
from limitwatch.services.request_context import get_request_id

REDACTED = "[REDACTED]"

# Whatever a bare record carries is not an ``extra``.
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "taskName"}


def _mask_credential(text: str) -> str:
    key = settings.upstream_api_key
    return text.replace(key, REDACTED) if key else text


def record_extras(record: logging.LogRecord) -> dict[str, Any]:
    """Return the ``extra`` fields of *record* with credentials masked."""
    redacted = {name.lower() for name in settings.log_redacted_fields}
    return {
        key: REDACTED if key.lower() in redacted else value
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRS
    }


def _format_exc(record: logging.LogRecord) -> str | None:
    if not record.exc_info or record.exc_info[0] is None:
        return None
    return _mask_credential("".join(traceback.format_exception(*record.exc_info)))


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        record.message = _mask_credential(record.getMessage())
        entry: dict = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.message,
        }
        if request_id := get_request_id():
            entry["request_id"] = request_id
        entry.update(record_extras(record))

        exc = _format_exc(record)
        if exc:
            entry["exception"] = exc
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """``<ts> <LEVEL> [rid] logger - message key=value ...``"""

    def format(self, record: logging.LogRecord) -> str:
        record.message = _mask_credential(record.getMessage())
        ts = datetime.fromtimestamp(
            record.created, tz=timezone.utc
        ).strftime("%Y-%m-%d %H:%M:%S")

        request_id = get_request_id()
        rid = f"[{request_id[:12]}] " if request_id else ""
        line = f"{ts} {record.levelname:<8} {rid}{record.name} - {record.message}"

        extras = record_extras(record)
        if extras:
            line += " " + " ".join(f"{k}={v}" for k, v in extras.items())

        exc = _format_exc(record)
        if exc:
            line += "\n" + exc
        return line


def setup_logging(log_level: str = "INFO", log_format: str = "text") -> None:
    """Configure the root logger. Call once at startup."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    formatter = JSONFormatter() if log_format.lower() == "json" else TextFormatter()
    handler.setFormatter(formatter)
    root.addHandler(handler)

    # httpx logs every request line at INFO; the access log already covers it.
    logging.getLogger("httpx").setLevel(logging.WARNING)
