"""
Structured logging setup.

Every module logs through `structlog.get_logger(__name__)` with short
snake_case event names and keyword context. Rendering is JSON in production
and the console renderer for local development.
"""
from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog


def add_service_context(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Copy service and request-scoped context (user id) onto every entry."""
    for key, value in structlog.contextvars.get_contextvars().items():
        event_dict.setdefault(key, value)
    return event_dict


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    service_name: str = "status-dashboard",
) -> None:
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        add_service_context,
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.bind_contextvars(
        service=service_name,
        environment=os.getenv("APP_ENV", "development"),
    )
