from __future__ import annotations

import httpx
from fastapi import APIRouter, Depends, Response

from limitwatch.api.dependencies import get_upstream_client
from limitwatch.api.schemas import (
    ErrorResponse,
    LimitsResponse,
    UpstreamErrorResponse,
)
from limitwatch.services.upstream import fetch_limits

router = APIRouter(prefix="/api", tags=["limits"])


@router.get(
    "/limits",
    response_model=LimitsResponse,
    summary="Current upstream rate limits",
    description="Query the upstream API once and return its rate-limit "
    "telemetry normalized to limit, remaining and reset (seconds). "
    "Nothing is cached.",
    responses={
        500: {"model": ErrorResponse, "description": "Upstream credential missing"},
        502: {
            "model": UpstreamErrorResponse,
            "description": "Upstream failed, or answered without usable "
            "rate-limit fields (body then carries `sample` instead of "
            "`status`/`details`)",
        },
    },
)
async def get_limits(
    response: Response,
    client: httpx.AsyncClient = Depends(get_upstream_client),
):
    snapshot = await fetch_limits(client)
    response.headers["Cache-Control"] = "no-store"
    return snapshot.model_dump()
