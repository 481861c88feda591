"""
FastAPI dependency injection providers for the DKA audit API.

Defines reusable Depends() callables for the audit handlers, the
resolved settings and the originating client address. Handlers are
built during start-up and stored on ``app.state``.
"""

from __future__ import annotations

from fastapi import Request

from api.audit.calculate_handler import CalculateHandler
from api.audit.update_handler import UpdateHandler
from dka_common.config import Settings
from dka_common.utils import resolve_client_ip


def get_app_settings(request: Request) -> Settings:
    """Return the settings the app was created with."""
    return request.app.state.settings


def get_calculate_handler(request: Request) -> CalculateHandler:
    """Return the shared ``CalculateHandler`` from app state."""
    return request.app.state.calculate_handler


def get_update_handler(request: Request) -> UpdateHandler:
    """Return the shared ``UpdateHandler`` from app state."""
    return request.app.state.update_handler


def get_client_ip(request: Request) -> str | None:
    """Return the client address, honouring trusted ``X-Forwarded-For`` hops."""
    settings: Settings = request.app.state.settings
    peer = request.client.host if request.client else None
    return resolve_client_ip(
        request.headers.get("x-forwarded-for"),
        peer,
        settings.trusted_proxy_hops,
    )
