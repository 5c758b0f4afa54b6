"""Metrics middleware for request instrumentation.

Records HTTP request metrics to Prometheus. The endpoint label is the
matched route template (e.g. /v1/submissions/{submission_id}) so record
ids do not explode label cardinality.
"""

import time
from collections.abc import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from bluecarbon.infrastructure.monitoring.metrics import get_metrics_collector

_ERROR_TYPES: dict[int, str] = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    409: "conflict",
    422: "validation_error",
    500: "internal_error",
    502: "bad_gateway",
    503: "service_unavailable",
}


def _classify_error_type(status_code: int) -> str:
    """Classify HTTP error status code into error type."""
    if status_code in _ERROR_TYPES:
        return _ERROR_TYPES[status_code]
    if 400 <= status_code < 500:
        return "client_error"
    if status_code >= 500:
        return "server_error"
    return "unknown"


def _endpoint_label(request: Request) -> str:
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    return path if isinstance(path, str) else request.url.path


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to record HTTP request metrics.

    Records:
    - Request duration (histogram)
    - Total requests (counter)
    - Failed requests (counter for 4xx/5xx)
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        method = request.method
        endpoint = _endpoint_label(request)
        status = str(response.status_code)

        collector = get_metrics_collector()
        collector.observe_request_duration(
            method=method, endpoint=endpoint, duration=duration
        )
        collector.increment_requests(method=method, endpoint=endpoint, status=status)
        if response.status_code >= 400:
            collector.increment_failed_requests(
                method=method,
                endpoint=endpoint,
                status=status,
                error_type=_classify_error_type(response.status_code),
            )
        return response
