"""
Health check API router for the DKA audit API.

Returns the API's own liveness plus a database connectivity probe.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from pydantic import BaseModel

from dka_common.db.connection import check_database_health

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    services: dict[str, str]


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    services: dict[str, str] = {}

    factory = getattr(request.app.state, "db_session_factory", None)
    if factory is None:
        services["database"] = "not_configured"
    elif await check_database_health(factory):
        services["database"] = "healthy"
    else:
        services["database"] = "unhealthy"

    overall = "healthy" if all(
        v in ("healthy", "not_configured") for v in services.values()
    ) else "degraded"

    return HealthResponse(status=overall, services=services)
