"""Registry metrics port definition.

Lets the application layer record operational counters without
depending on the Prometheus implementation.
"""

from __future__ import annotations

from typing import Protocol


class RegistryMetricsProtocol(Protocol):
    """Operational counters recorded by lifecycle and outbox services."""

    def record_submission_created(self, initial_status: str) -> None:
        """Count a created submission by its initial status."""
        ...

    def record_status_transition(self, to_status: str) -> None:
        """Count an applied status transition by target status."""
        ...

    def record_credit_minted(self, amount: float) -> None:
        """Count a minted credit and its tonnage."""
        ...

    def record_credit_sold(self, amount: float) -> None:
        """Count a sold credit and its tonnage."""
        ...

    def record_oracle_call(self, operation: str, outcome: str) -> None:
        """Count an oracle call ("verify"/"ask") by outcome."""
        ...

    def record_outbox_delivery(self, operation: str, result: str) -> None:
        """Count an outbox delivery attempt by result."""
        ...

    def set_outbox_depth(self, status: str, count: int) -> None:
        """Set the number of outbox entries in a sync status."""
        ...
