"""
FastAPI application entry point for the DKA audit API.

Creates and configures the FastAPI app, registers routers, middleware,
exception handlers and the startup/shutdown lifecycle, and exposes the
ASGI application.

The patient hasher is built when the app is created, so a missing
``DKA_PEPPER`` stops the process before it serves a single request.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog
import uvicorn
from fastapi import FastAPI
from prometheus_client import make_asgi_app

from api.audit.calculate_handler import CalculateHandler
from api.audit.calculator import load_calculator
from api.audit.deprivation import PostcodesIoDeprivationResolver
from api.audit.hasher import PatientHasher
from api.audit.id_generator import AuditIdGenerator
from api.audit.store import SqlAuditRecordStore
from api.audit.update_handler import UpdateHandler
from api.errors import register_exception_handlers
from api.middleware.cors import add_cors
from api.middleware.logging import LoggingMiddleware
from api.routers import episodes, health, info
from dka_common.config import Settings, get_settings
from dka_common.db.connection import build_engine, build_session_factory
from dka_common.logging import configure_logging

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    settings: Settings = app.state.settings
    hasher: PatientHasher = app.state.hasher

    # Startup
    calculator = load_calculator(settings)

    engine = build_engine(settings)
    session_factory = build_session_factory(engine)
    app.state.db_session_factory = session_factory

    store = SqlAuditRecordStore(session_factory)
    deprivation = PostcodesIoDeprivationResolver(
        store.imd_decile_for_lsoa,
        base_url=settings.postcode_api_url,
        max_attempts=settings.postcode_api_max_attempts,
        timeout=settings.postcode_api_timeout,
    )

    app.state.calculate_handler = CalculateHandler(
        calculator=calculator,
        hasher=hasher,
        id_generator=AuditIdGenerator(store),
        store=store,
        deprivation=deprivation,
        deprivation_failure_policy=settings.deprivation_failure_policy,
    )
    app.state.update_handler = UpdateHandler(store=store, hasher=hasher)
    logger.info("api_starting", deprivation_policy=settings.deprivation_failure_policy)

    yield

    # Shutdown
    logger.info("api_stopping")
    await deprivation.close()
    await engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build and return the fully-configured FastAPI application.

    Raises:
        pydantic.ValidationError: Settings are loaded from the
            environment and ``DKA_PEPPER`` is missing.
        ConfigurationError: The pepper is blank.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, json_logs=settings.log_json)

    app = FastAPI(
        title="DKA Calculator Audit API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.hasher = PatientHasher(settings.pepper.get_secret_value())
    app.state.db_session_factory = None

    app.include_router(episodes.router)
    app.include_router(health.router)
    app.include_router(info.router)

    # Prometheus metrics endpoint
    app.mount("/metrics", make_asgi_app())

    register_exception_handlers(app)

    # ── Middleware (last added is outermost) ──
    app.add_middleware(LoggingMiddleware)
    add_cors(app, settings.cors_origins)

    return app


app = create_app()


def run() -> None:
    """Serve the API with uvicorn using the configured bind address."""
    settings: Settings = app.state.settings
    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        proxy_headers=False,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
