"""Server-side failures of the ``/api/limits`` proxy.

Each error knows the HTTP status it maps to and the context fields that go
into the ``{"error": ..., ...}`` response body.
"""

from __future__ import annotations

from typing import Any


class LimitWatchError(Exception):
    """Base exception for failures that terminate a single proxy request."""

    status_code: int = 500

    def __init__(self, message: str, **context: Any) -> None:
        self.message = message
        self.context = context
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, **self.context}


class ConfigError(LimitWatchError):
    """Raised when the upstream credential is not configured."""

    status_code = 500

    def __init__(self, message: str = "Missing upstream API key") -> None:
        super().__init__(message)


class UpstreamError(LimitWatchError):
    """Raised when the upstream API answers non-2xx or cannot be reached.

    ``status`` is ``None`` for transport failures where no response arrived.
    """

    status_code = 502

    def __init__(
        self,
        status: int | None,
        details: str,
        message: str = "Upstream API request failed",
    ) -> None:
        super().__init__(message, status=status, details=details)
        self.status = status
        self.details = details


class NormalizationError(LimitWatchError):
    """Raised when no body shape or header yields a complete limits triple."""

    status_code = 502

    def __init__(self, sample: str) -> None:
        super().__init__(
            "Upstream response did not include expected rate-limit fields",
            sample=sample,
        )
        self.sample = sample
