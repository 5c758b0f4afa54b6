"""Structured logging and request correlation."""

from bluecarbon.infrastructure.observability.correlation import (
    CORRELATION_HEADER,
    correlation_id_processor,
    generate_correlation_id,
    get_correlation_id,
    resolve_correlation_id,
    set_correlation_id,
)
from bluecarbon.infrastructure.observability.logging import configure_structlog

__all__: list[str] = [
    "CORRELATION_HEADER",
    "configure_structlog",
    "correlation_id_processor",
    "generate_correlation_id",
    "get_correlation_id",
    "resolve_correlation_id",
    "set_correlation_id",
]
