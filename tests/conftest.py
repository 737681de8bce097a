from typing import Callable

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from limitwatch.api.dependencies import build_upstream_client, get_upstream_client
from limitwatch.api.main import app
from limitwatch.config import settings
from limitwatch.services.metrics import metrics


@pytest.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture(autouse=True)
def _reset_metrics():
    """Reset counters between every test."""
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setattr(settings, "upstream_api_key", "test-key")
    return "test-key"


@pytest.fixture
def mock_upstream():
    """Route the proxy's outbound call to a handler chosen by the test.

    Returns an installer; the list it returns records every upstream request.
    """
    seen: list[httpx.Request] = []

    def install(
        handler: Callable[[httpx.Request], httpx.Response],
    ) -> list[httpx.Request]:
        def recording(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)

        async def _client():
            async with build_upstream_client(
                transport=httpx.MockTransport(recording)
            ) as upstream_client:
                yield upstream_client

        app.dependency_overrides[get_upstream_client] = _client
        return seen

    yield install
    app.dependency_overrides.clear()
