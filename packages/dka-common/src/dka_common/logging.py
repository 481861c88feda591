"""
Structured logging setup for the DKA audit API.

Configures structlog for JSON-formatted structured logging. Every log
line includes timestamp, level, service name, and event. Per-request
context (audit_id) is bound by the handlers at processing time.
"""

from __future__ import annotations

import logging
import sys

import structlog
from structlog.typing import EventDict, Processor


def configure_logging(
    level: str = "INFO",
    *,
    json_logs: bool = True,
    service: str = "dka-audit-api",
) -> None:
    """Install the structlog processor chain and stdlib root handler.

    Args:
        level: Minimum level name (``"DEBUG"``, ``"INFO"`` ...).
        json_logs: Render JSON lines when ``True``, coloured console
            output otherwise.
        service: Value of the ``service`` key added to every event.
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)

    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _add_service(service),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def _add_service(service: str) -> Processor:
    def processor(
        _logger: object, _method: str, event_dict: EventDict,
    ) -> EventDict:
        event_dict.setdefault("service", service)
        return event_dict

    return processor
