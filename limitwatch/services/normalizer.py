"""Normalize upstream rate-limit telemetry into a single snapshot.

The upstream body has carried the limits under different paths across API
versions, and some deployments only send ``X-RateLimit-*`` headers.  The
first body shape that is present wins; each field then falls back to its
header on its own.  A snapshot is returned only when all three fields
resolve to finite numbers.
"""

from __future__ import annotations

import enum
import logging
import math
from typing import Any, Mapping

import httpx
from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

FIELDS: tuple[str, ...] = ("limit", "remaining", "reset")


class BodyShape(enum.Enum):
    """Known body layouts, in priority order."""

    RATE_LIMIT_CREATE = ("rateLimit", "measurements", "create")
    MEASUREMENTS = ("measurements",)
    LIMITS_CREATE = ("limits", "measurements", "create")

    @property
    def path(self) -> tuple[str, ...]:
        return self.value

    @property
    def label(self) -> str:
        return ".".join(self.value)


class RateLimitSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    limit: int | float
    remaining: int | float
    reset: int | float


def coerce_number(value: Any) -> int | float | None:
    """Return *value* as a finite number, or ``None`` if it is not one.

    Numbers and numeric strings are accepted; booleans, ``None``, containers,
    non-numeric strings, NaN and infinities are rejected.  Integral values
    come back as ``int``.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        number = value
    elif isinstance(value, str):
        # Digit separators ("1_000") are not numeric here, though float() takes them.
        if "_" in value:
            return None
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None

    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number


def _lookup(payload: Any, path: tuple[str, ...]) -> Any:
    node = payload
    for key in path:
        if not isinstance(node, Mapping):
            return None
        node = node.get(key)
    return node


def select_body(payload: Any) -> tuple[BodyShape, Any] | None:
    """Pick the first body shape present in *payload*.

    A shape counts as present when its value is not ``None``, even if it is
    empty or not an object.
    """
    for shape in BodyShape:
        body = _lookup(payload, shape.path)
        if body is not None:
            return shape, body
    return None


def _resolve_field(body: Any, headers: httpx.Headers, name: str) -> Any:
    if isinstance(body, Mapping):
        value = body.get(name)
        if value is not None:
            return value
    return headers.get(f"x-ratelimit-{name}")


def normalize(
    payload: Any, headers: Mapping[str, str] | httpx.Headers | None
) -> RateLimitSnapshot | None:
    """Build a snapshot from *payload* and *headers*, or return ``None``.

    Partial results are never returned: one unresolved or non-numeric field
    makes the whole result ``None``.
    """
    header_map = httpx.Headers(headers or {})
    selected = select_body(payload)
    body = selected[1] if selected else None
    if selected:
        logger.debug("Rate limits read from body shape %s", selected[0].label)

    values: dict[str, int | float] = {}
    for name in FIELDS:
        number = coerce_number(_resolve_field(body, header_map, name))
        if number is None:
            logger.debug("Rate-limit field %r missing or not numeric", name)
            return None
        values[name] = number

    return RateLimitSnapshot(**values)
