"""
Episode API router for the DKA audit API.

``POST /calculate`` creates an audit record for a new episode and
returns its metrics. ``POST /update`` amends the outcome fields of an
existing record once the resubmitted patient identity matches.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends

from api.audit.calculate_handler import CalculateHandler
from api.audit.update_handler import UPDATE_COMPLETE_MESSAGE, UpdateHandler
from api.dependencies import get_calculate_handler, get_client_ip, get_update_handler
from api.schemas.episode_schemas import (
    CalculateRequest,
    CalculateResponse,
    ErrorEnvelope,
    UpdateRequest,
    UpdateResponse,
)
from dka_common.errors import DkaAuditError, InfrastructureError

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["episodes"])


@router.post(
    "/calculate",
    response_model=CalculateResponse,
    responses={400: {"model": ErrorEnvelope}, 500: {"model": ErrorEnvelope}},
)
async def calculate(
    body: CalculateRequest,
    handler: CalculateHandler = Depends(get_calculate_handler),
    client_ip: str | None = Depends(get_client_ip),
) -> CalculateResponse:
    try:
        result = await handler.create(body, client_ip=client_ip)
    except DkaAuditError:
        raise
    except Exception as exc:
        logger.exception("calculate_failed")
        raise InfrastructureError() from exc

    return CalculateResponse(audit_id=result.audit_id, calculations=result.calculations)


@router.post(
    "/update",
    response_model=UpdateResponse,
    responses={
        400: {"model": ErrorEnvelope},
        401: {"model": ErrorEnvelope},
        404: {"model": ErrorEnvelope},
        500: {"model": ErrorEnvelope},
    },
)
async def update(
    body: UpdateRequest,
    handler: UpdateHandler = Depends(get_update_handler),
) -> UpdateResponse:
    try:
        audit_id = await handler.amend(body.audit_id, body.patient_hash, body.amendment())
    except DkaAuditError:
        raise
    except Exception as exc:
        logger.exception("update_failed", audit_id=body.audit_id)
        raise InfrastructureError() from exc

    return UpdateResponse(audit_id=audit_id, message=UPDATE_COMPLETE_MESSAGE)
