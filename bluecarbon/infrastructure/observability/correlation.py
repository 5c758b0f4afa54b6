"""Request correlation ids.

The id of the current request lives in a contextvar, so it follows the
request across await points. Log lines emitted while handling the request
carry it, and so do the outbox entries the request enqueues.
"""

from contextvars import ContextVar
from typing import Any
from uuid import uuid4

CORRELATION_HEADER = "X-Correlation-ID"

# Longer client-supplied ids are truncated before they reach the logs
MAX_CORRELATION_ID_LENGTH = 128

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def generate_correlation_id() -> str:
    return str(uuid4())


def resolve_correlation_id(header_value: str | None) -> str:
    """Use the client's id when it sent a non-blank one, else mint one."""
    if header_value is not None and header_value.strip():
        return header_value.strip()[:MAX_CORRELATION_ID_LENGTH]
    return generate_correlation_id()


def get_correlation_id() -> str:
    """Current correlation id, or "" outside a request."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> None:
    _correlation_id.set(correlation_id)


def correlation_id_processor(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """structlog processor: add correlation_id unless already bound."""
    correlation_id = _correlation_id.get()
    if correlation_id:
        event_dict.setdefault("correlation_id", correlation_id)
    return event_dict
