"""Request logging with correlation ids.

Each request gets a correlation id (the client's X-Correlation-ID, or a
fresh one), which is echoed in the response and attached to every log
line emitted while handling it. Prometheus scrapes are logged at debug
level only.
"""

import time
from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from bluecarbon.api.dependencies.registry import USER_HEADER
from bluecarbon.infrastructure.observability.correlation import (
    CORRELATION_HEADER,
    resolve_correlation_id,
    set_correlation_id,
)

QUIET_PATHS = frozenset({"/v1/metrics", "/v1/health"})


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        correlation_id = resolve_correlation_id(request.headers.get(CORRELATION_HEADER))
        set_correlation_id(correlation_id)

        log = structlog.get_logger().bind(
            correlation_id=correlation_id,
            method=request.method,
            path=request.url.path,
            actor_id=request.headers.get(USER_HEADER),
        )
        emit = log.debug if request.url.path in QUIET_PATHS else log.info

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            log.exception(
                "request_failed",
                elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
                error_type=type(exc).__name__,
            )
            raise

        emit(
            "request_completed",
            status_code=response.status_code,
            elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        response.headers[CORRELATION_HEADER] = correlation_id
        return response
