"""
Exception handlers for the DKA audit API.

Every error leaves the API in one envelope, ``{"kind", "message"}``
plus ``errors`` for client-side validation failures. Unknown routes
get the same treatment.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from dka_common.errors import DkaAuditError, SubmissionValidationError

logger = structlog.get_logger(__name__)


def _validation_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    return [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "msg": err.get("msg", ""),
            "type": err.get("type", ""),
        }
        for err in exc.errors()
    ]


async def audit_error_handler(request: Request, exc: DkaAuditError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = SubmissionValidationError(_validation_errors(exc))
    logger.info("request_validation_failed", path=request.url.path, error_count=len(error.errors))
    return JSONResponse(status_code=error.status_code, content=jsonable_encoder(error.to_dict()))


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Unknown paths and unsupported methods on known paths both miss the router
    if exc.status_code in (404, 405):
        return JSONResponse(
            status_code=404,
            content={"kind": "not_found", "message": "Incorrect API route"},
        )
    body = {"kind": "http_error", "message": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=body, headers=exc.headers)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the envelope-producing handlers to *app*."""
    app.add_exception_handler(DkaAuditError, audit_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
