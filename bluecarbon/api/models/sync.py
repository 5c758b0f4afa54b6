"""Sync status response models."""

from __future__ import annotations

from uuid import UUID

from pydantic import Field

from bluecarbon.api.models.common import CamelModel, DateTimeWithZ
from bluecarbon.domain.models.outbox import OutboxEntry


class OutboxEntryModel(CamelModel):
    id: UUID
    operation: str
    record_id: str
    status: str
    attempts: int
    last_error: str | None
    created_at: DateTimeWithZ
    next_attempt_at: DateTimeWithZ
    synced_at: DateTimeWithZ | None
    correlation_id: str | None = None

    @classmethod
    def from_domain(cls, entry: OutboxEntry) -> OutboxEntryModel:
        return cls(
            id=entry.id,
            operation=entry.operation.value,
            record_id=entry.record_id,
            status=entry.status.value,
            attempts=entry.attempts,
            last_error=entry.last_error,
            created_at=entry.created_at,
            next_attempt_at=entry.next_attempt_at,
            synced_at=entry.synced_at,
            correlation_id=entry.correlation_id,
        )


class SyncStatusResponse(CamelModel):
    mode: str = Field(..., description="online or offline")
    pending: int
    synced: int
    failed: int
    entries: list[OutboxEntryModel]


class RetryRequest(CamelModel):
    entry_id: UUID | None = Field(
        default=None, description="Re-queue one FAILED entry; all when omitted"
    )


class RetryResponse(CamelModel):
    requeued: int
    delivered: int
    retried: int
    failed: int


class RefreshResponse(CamelModel):
    submissions_added: int
    credits_added: int
    credits_skipped: int = 0
