"""Remote persistence errors.

These never propagate past the outbox: the local record store is the
source of truth for the running session.
"""

from __future__ import annotations

from bluecarbon.domain.exceptions import BlueCarbonError


class RemotePersistenceError(BlueCarbonError):
    """Raised by persistence adapters when a remote call fails.

    Attributes:
        operation: The remote operation that failed.
        table: Target table name.
        record_id: Record identifier, if the call addressed one.
    """

    def __init__(
        self,
        operation: str,
        table: str,
        message: str,
        record_id: str | None = None,
    ) -> None:
        self.operation = operation
        self.table = table
        self.record_id = record_id
        target = f"{table}/{record_id}" if record_id else table
        super().__init__(f"{operation} on {target} failed: {message}")


class PersistenceNotConfiguredError(BlueCarbonError):
    """Raised when a remote call is attempted in offline mode."""

    def __init__(self) -> None:
        super().__init__("Remote persistence is not configured")
