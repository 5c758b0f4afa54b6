"""structlog configuration for the registry service.

Production emits one JSON object per line; any other environment uses
the coloured console renderer. Every entry carries an ISO timestamp, the
level, the service name and, inside a request, the correlation id:

    {"event": "submission_created", "level": "info",
     "timestamp": "2026-03-01T09:00:00.000000Z",
     "service_name": "bluecarbon-api", "correlation_id": "...",
     "service": "SubmissionLifecycleController", "status": "AI_VERIFIED"}

Environment Variables:
- LOG_LEVEL (default: INFO)
- SERVICE_NAME (default: bluecarbon-api)
"""

import logging
import os
from typing import Any, cast

import structlog
from structlog.typing import Processor

from bluecarbon.infrastructure.observability.correlation import (
    correlation_id_processor,
)

PRODUCTION_ENVIRONMENTS = frozenset({"prod", "production"})
DEFAULT_SERVICE_NAME = "bluecarbon-api"


def _log_level() -> int:
    name = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def _service_name_processor(service_name: str) -> Processor:
    def add_service_name(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        event_dict.setdefault("service_name", service_name)
        return event_dict

    return cast(Processor, add_service_name)


def _renderer(environment: str) -> Processor:
    if environment.lower() in PRODUCTION_ENVIRONMENTS:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=True)


def configure_structlog(environment: str = "production") -> None:
    """Configure structlog once, at application start-up."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _service_name_processor(os.getenv("SERVICE_NAME", DEFAULT_SERVICE_NAME)),
        cast(Processor, correlation_id_processor),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _renderer(environment),
    ]
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_log_level()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
