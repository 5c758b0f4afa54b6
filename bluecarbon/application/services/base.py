"""Structured logging shared by registry services and adapters.

Every service logs through structlog with the same three keys, so one
command can be followed across the controller, the outbox and the
adapters:

    service        class name of the emitting service
    component      "registry", "sync", "oracle", "persistence", ...
    operation      the command or adapter call being performed

The request correlation id is added per operation when a request set one.
"""

from typing import Any

import structlog

from bluecarbon.infrastructure.observability.correlation import get_correlation_id


class LoggingMixin:
    """Gives a service a component-bound logger.

    Call _init_logger() from __init__; use _log_operation() for a child
    logger scoped to one command.
    """

    _log: Any

    def _init_logger(self, component: str = "registry") -> None:
        self._log = structlog.get_logger().bind(
            service=type(self).__name__, component=component
        )

    def _log_operation(self, operation: str, **context: object) -> Any:
        """Child logger for one operation.

        Example:
            log = self._log_operation("purchase_credit", credit_id=credit_id)
            log.info("credit_purchased")
        """
        correlation_id = get_correlation_id()
        if correlation_id:
            context.setdefault("correlation_id", correlation_id)
        return self._log.bind(operation=operation, **context)
