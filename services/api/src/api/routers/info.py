"""
Informational root page for the DKA audit API.

Browsers that land on the API are pointed at the public calculator.
"""

from __future__ import annotations

from html import escape

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from api.dependencies import get_app_settings
from dka_common.config import Settings

router = APIRouter(tags=["info"])


@router.get("/", response_class=HTMLResponse)
async def root(settings: Settings = Depends(get_app_settings)) -> HTMLResponse:
    url = escape(settings.site_url, quote=True)
    return HTMLResponse(f"Please go to <a href='{url}'>{url}</a> instead.")
