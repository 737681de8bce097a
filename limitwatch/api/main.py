from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from limitwatch.api.exception_handlers import (
    http_exception_handler,
    limitwatch_error_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from limitwatch.api.middleware import RequestLoggingMiddleware
from limitwatch.api.routes.limits import router as limits_router
from limitwatch.api.routes.page import router as page_router
from limitwatch.api.schemas import HealthResponse
from limitwatch.config import settings
from limitwatch.errors import LimitWatchError
from limitwatch.logging_config import setup_logging
from limitwatch.services.metrics import metrics

logger = logging.getLogger("limitwatch")

_DESCRIPTION = """\
Proxy for an upstream API's rate-limit telemetry.

`GET /api/limits` calls the upstream once per request and returns
`limit`, `remaining` and `reset` (seconds). The upstream has reported these
under several body layouts and sometimes only in `X-RateLimit-*` headers;
the first layout present is used and each missing field falls back to its
header. A response is either a complete triple or an error, never partial.

`GET /` serves a status page that polls `/api/limits` on a selectable
interval.
"""

_OPENAPI_TAGS = [
    {"name": "system", "description": "Health checks and operational endpoints."},
    {"name": "limits", "description": "Normalized upstream rate limits."},
    {"name": "page", "description": "Self-refreshing status page."},
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.log_level, settings.log_format)
    if not settings.upstream_api_key:
        logger.warning(
            "UPSTREAM_API_KEY is not set; /api/limits will answer 500"
        )
    yield


app = FastAPI(
    title="LimitWatch",
    version="0.1.0",
    summary="Normalized upstream rate-limit telemetry",
    description=_DESCRIPTION,
    openapi_tags=_OPENAPI_TAGS,
    license_info={"name": "MIT", "identifier": "MIT"},
    lifespan=lifespan,
)

app.add_exception_handler(LimitWatchError, limitwatch_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

origins = [o.strip() for o in settings.cors_origins.split(",")]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_methods=["GET"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(page_router)
app.include_router(limits_router)


@app.get(
    "/health",
    tags=["system"],
    summary="Health check",
    response_model=HealthResponse,
)
async def health():
    """Report liveness and whether the upstream credential is configured."""
    return {
        "status": "ok",
        "upstream_configured": bool(settings.upstream_api_key),
        "uptime_seconds": metrics.uptime_seconds(),
    }


@app.get(
    "/metrics",
    tags=["system"],
    summary="Application metrics",
    description="Request counters, upstream outcomes, normalization "
    "failures and latency percentiles.",
)
async def get_metrics():
    return metrics.snapshot()
