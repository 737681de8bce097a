"""Single outbound call to the upstream rate-limit endpoint."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from limitwatch.config import settings
from limitwatch.errors import ConfigError, NormalizationError, UpstreamError
from limitwatch.services.metrics import metrics
from limitwatch.services.normalizer import RateLimitSnapshot, normalize

logger = logging.getLogger(__name__)


def _sample(payload: Any, raw_text: str, max_chars: int) -> str:
    if payload is None and raw_text:
        return raw_text[:max_chars]
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str)[
        :max_chars
    ]


async def fetch_limits(
    client: httpx.AsyncClient,
    *,
    api_key: str | None = None,
    url: str | None = None,
) -> RateLimitSnapshot:
    """Fetch upstream telemetry and normalize it.

    Raises:
        ConfigError: no credential is configured.
        UpstreamError: the upstream is unreachable or answered non-2xx.
        NormalizationError: no complete ``limit/remaining/reset`` triple.
    """
    key = settings.upstream_api_key if api_key is None else api_key
    if not key:
        metrics.inc_config_error()
        raise ConfigError()

    target = url or settings.upstream_url
    max_chars = settings.sample_max_chars
    headers = {"Authorization": f"Bearer {key}", "Accept": "application/json"}

    try:
        resp = await client.get(target, headers=headers)
    except httpx.HTTPError as exc:
        metrics.inc_upstream(False)
        logger.warning("Upstream request to %s failed: %s", target, exc)
        raise UpstreamError(
            None, str(exc)[:max_chars], message="Upstream API unreachable"
        ) from exc

    if not resp.is_success:
        metrics.inc_upstream(False)
        logger.warning(
            "Upstream %s answered %d",
            target,
            resp.status_code,
            extra={"upstream_status": resp.status_code},
        )
        raise UpstreamError(resp.status_code, resp.text[:max_chars])

    metrics.inc_upstream(True)

    try:
        payload = resp.json()
    except ValueError:
        # Headers alone may still carry the limits.
        logger.info("Upstream body is not JSON; falling back to headers")
        payload = None

    snapshot = normalize(payload, resp.headers)
    if snapshot is None:
        metrics.inc_normalization_failure()
        sample = _sample(payload, resp.text, max_chars)
        logger.warning("Upstream response lacked rate-limit fields: %s", sample)
        raise NormalizationError(sample)

    return snapshot
