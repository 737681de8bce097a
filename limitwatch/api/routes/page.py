from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from limitwatch.api.page import render_page
from limitwatch.config import settings

router = APIRouter(tags=["page"])


@router.get("/", response_class=HTMLResponse, summary="Status page")
async def status_page() -> HTMLResponse:
    """Serve the self-refreshing limits page; needs no upstream credential."""
    html = render_page(settings.refresh_intervals_ms, settings.default_refresh_ms)
    return HTMLResponse(html, headers={"Cache-Control": "no-store"})
