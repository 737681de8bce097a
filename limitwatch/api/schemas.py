"""Pydantic response models for OpenAPI documentation."""

from __future__ import annotations

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """Structured error returned by all non-2xx responses."""

    error: str = Field(..., description="Human-readable error message")
    status_code: int | None = Field(
        None, description="HTTP status code (generic HTTP errors only)"
    )


# ---------------------------------------------------------------------------
# /health
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    status: str = Field(..., description="Always 'ok' while the process serves")
    upstream_configured: bool = Field(
        ..., description="Whether the upstream credential is set"
    )
    uptime_seconds: float = Field(..., description="Seconds since the process started")


# ---------------------------------------------------------------------------
# /api/limits
# ---------------------------------------------------------------------------


class LimitsResponse(BaseModel):
    """Normalized rate-limit snapshot for the upstream API."""

    limit: int | float = Field(..., description="Requests allowed in the current window")
    remaining: int | float = Field(
        ..., description="Requests left in the current window, as reported"
    )
    reset: int | float = Field(..., description="Seconds until the window resets")


class UpstreamErrorResponse(BaseModel):
    """Upstream answered non-2xx or could not be reached."""

    error: str
    status: int | None = Field(None, description="Upstream HTTP status, if any")
    details: str = Field(..., description="Truncated upstream body or failure reason")

