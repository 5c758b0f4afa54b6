"""Outbox entry model for remote persistence synchronisation.

Every remote write is captured as an OutboxEntry so reconciliation with
the hosted store is observable (PENDING, SYNCED, FAILED) instead of being
silently swallowed.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from enum import Enum
from uuid import UUID, uuid4

from bluecarbon.domain.models.credit_record import CreditRecord
from bluecarbon.domain.models.submission import Submission


class OutboxOperation(Enum):
    """Remote write operations mirrored to the hosted store."""

    INSERT_SUBMISSION = "INSERT_SUBMISSION"
    INSERT_CREDIT = "INSERT_CREDIT"
    UPDATE_SUBMISSION = "UPDATE_SUBMISSION"
    UPDATE_CREDIT = "UPDATE_CREDIT"


class SyncStatus(Enum):
    """Delivery status of an outbox entry."""

    PENDING = "PENDING"
    SYNCED = "SYNCED"
    FAILED = "FAILED"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class OutboxEntry:
    """A remote write awaiting (or past) delivery.

    Attributes:
        operation: Remote operation to perform.
        record_id: Submission or credit identifier.
        payload: Record snapshot taken when the write was enqueued; dropped
            once the entry is SYNCED.
        id: Entry identifier.
        status: Delivery status.
        attempts: Delivery attempts made so far.
        last_error: Message of the last failed attempt.
        created_at: Enqueue time.
        next_attempt_at: Earliest time of the next attempt.
        synced_at: Time of successful delivery.
        correlation_id: Correlation id of the request that enqueued it.
    """

    operation: OutboxOperation
    record_id: str
    payload: Submission | CreditRecord | None
    id: UUID = field(default_factory=uuid4)
    status: SyncStatus = field(default=SyncStatus.PENDING)
    attempts: int = field(default=0)
    last_error: str | None = field(default=None)
    created_at: datetime = field(default_factory=_utc_now)
    next_attempt_at: datetime = field(default_factory=_utc_now)
    synced_at: datetime | None = field(default=None)
    correlation_id: str | None = field(default=None)

    def is_due(self, now: datetime) -> bool:
        """Pending and past its scheduled attempt time."""
        return self.status == SyncStatus.PENDING and self.next_attempt_at <= now

    def mark_synced(self, now: datetime) -> OutboxEntry:
        return replace(
            self,
            status=SyncStatus.SYNCED,
            attempts=self.attempts + 1,
            last_error=None,
            synced_at=now,
            payload=None,
        )

    def mark_retry(self, error: str, delay_seconds: float, now: datetime) -> OutboxEntry:
        return replace(
            self,
            attempts=self.attempts + 1,
            last_error=error,
            next_attempt_at=now + timedelta(seconds=delay_seconds),
        )

    def mark_failed(self, error: str) -> OutboxEntry:
        return replace(
            self,
            status=SyncStatus.FAILED,
            attempts=self.attempts + 1,
            last_error=error,
        )

    def requeued(self, now: datetime) -> OutboxEntry:
        """Return a FAILED entry to the queue with a fresh attempt budget."""
        return replace(
            self,
            status=SyncStatus.PENDING,
            attempts=0,
            next_attempt_at=now,
        )
