"""HTTP middleware."""

from bluecarbon.api.middleware.logging_middleware import LoggingMiddleware
from bluecarbon.api.middleware.metrics_middleware import MetricsMiddleware

__all__ = ["LoggingMiddleware", "MetricsMiddleware"]
