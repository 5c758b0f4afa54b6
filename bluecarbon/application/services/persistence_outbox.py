"""Persistence outbox: best-effort remote mirroring with retries.

Local commits never wait on the hosted store. Each remote write is
queued as an OutboxEntry and delivered by drain(), either from the
background worker or on demand.

Delivery rules:
    - Due entries are delivered in enqueue order.
    - Entries for one record are delivered in order: while an earlier
      entry for the same record is undelivered, later ones wait.
    - A failed attempt is rescheduled after
      min(backoff_max, backoff_base * 2 ** (attempt - 1)) seconds plus
      jitter; after max_attempts the entry is FAILED.
    - FAILED entries can be re-queued with retry_failed().
    - Delivered entries drop their payload; only the newest
      synced_retention of them are kept for inspection.
    - Offline mode (no remote adapter) records nothing.
"""

from __future__ import annotations

import asyncio
import contextlib
import random
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import UUID

from bluecarbon.application.ports.registry_metrics import RegistryMetricsProtocol
from bluecarbon.application.ports.remote_persistence import RemotePersistenceProtocol
from bluecarbon.application.services.base import LoggingMixin
from bluecarbon.config.outbox_config import DEFAULT_OUTBOX_CONFIG, OutboxConfig
from bluecarbon.domain.errors.persistence import RemotePersistenceError
from bluecarbon.domain.models.credit_record import CreditRecord
from bluecarbon.domain.models.outbox import OutboxEntry, OutboxOperation, SyncStatus
from bluecarbon.domain.models.submission import Submission
from bluecarbon.infrastructure.observability.correlation import get_correlation_id

MODE_ONLINE = "online"
MODE_OFFLINE = "offline"


@dataclass(frozen=True)
class OutboxSummary:
    """Sync status counts across the outbox."""

    pending: int
    synced: int
    failed: int
    mode: str


@dataclass(frozen=True)
class DrainReport:
    """Result of one drain pass."""

    delivered: int
    retried: int
    failed: int


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PersistenceOutbox(LoggingMixin):
    """Queue of remote writes with observable sync status."""

    def __init__(
        self,
        remote: RemotePersistenceProtocol | None,
        config: OutboxConfig = DEFAULT_OUTBOX_CONFIG,
        metrics: RegistryMetricsProtocol | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Initialize the outbox.

        Args:
            remote: Hosted store adapter, or None for offline mode.
            config: Retry policy.
            metrics: Optional metrics sink.
            rng: Random source for jitter.
            clock: Time source, injectable for tests.
        """
        self._remote = remote
        self._config = config
        self._metrics = metrics
        self._rng = rng or random.Random()
        self._clock = clock
        self._entries: list[OutboxEntry] = []
        self._pruned_synced = 0
        self._drain_lock = asyncio.Lock()
        self._running = False
        self._task: asyncio.Task[None] | None = None
        self._init_logger(component="persistence")

    @property
    def offline(self) -> bool:
        return self._remote is None

    @property
    def mode(self) -> str:
        return MODE_OFFLINE if self.offline else MODE_ONLINE

    @property
    def running(self) -> bool:
        return self._running

    def enqueue(
        self,
        operation: OutboxOperation,
        payload: Submission | CreditRecord,
    ) -> OutboxEntry | None:
        """Queue a remote write. Returns None in offline mode."""
        if self.offline:
            self._log.debug(
                "outbox_offline_skip",
                operation=operation.value,
                record_id=payload.id,
            )
            return None

        entry = OutboxEntry(
            operation=operation,
            record_id=payload.id,
            payload=payload,
            created_at=self._clock(),
            next_attempt_at=self._clock(),
            correlation_id=get_correlation_id() or None,
        )
        self._entries.append(entry)
        self._log_operation(
            "enqueue", outbox_operation=operation.value, record_id=payload.id
        ).debug("outbox_entry_enqueued", entry_id=str(entry.id))
        self.publish_depth()
        return entry

    def entries(self, status: SyncStatus | None = None) -> list[OutboxEntry]:
        """Entries in enqueue order, optionally filtered by status."""
        if status is None:
            return list(self._entries)
        return [entry for entry in self._entries if entry.status == status]

    def get_entry(self, entry_id: UUID) -> OutboxEntry | None:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def summary(self) -> OutboxSummary:
        counts = {status: 0 for status in SyncStatus}
        for entry in self._entries:
            counts[entry.status] += 1
        return OutboxSummary(
            pending=counts[SyncStatus.PENDING],
            synced=counts[SyncStatus.SYNCED] + self._pruned_synced,
            failed=counts[SyncStatus.FAILED],
            mode=self.mode,
        )

    def backoff_delay(self, attempt: int) -> float:
        """Delay before the retry following the given failed attempt."""
        delay = min(
            self._config.backoff_max_seconds,
            self._config.backoff_base_seconds * (2 ** (attempt - 1)),
        )
        jitter = self._rng.uniform(0, delay * self._config.jitter_ratio)
        return delay + jitter

    def retry_failed(self, entry_id: UUID | None = None) -> int:
        """Re-queue FAILED entries (all of them, or one by id).

        Returns:
            Number of entries re-queued.
        """
        now = self._clock()
        requeued = 0
        for index, entry in enumerate(self._entries):
            if entry.status != SyncStatus.FAILED:
                continue
            if entry_id is not None and entry.id != entry_id:
                continue
            self._entries[index] = entry.requeued(now)
            requeued += 1

        self._log_operation("retry_failed").info(
            "outbox_entries_requeued", count=requeued
        )
        self.publish_depth()
        return requeued

    async def drain(self) -> DrainReport:
        """Deliver every due entry once, in enqueue order."""
        async with self._drain_lock:
            return await self._drain_due()

    async def _drain_due(self) -> DrainReport:
        log = self._log_operation("drain")
        delivered = retried = failed = 0
        blocked: set[str] = set()

        for index in range(len(self._entries)):
            entry = self._entries[index]
            if entry.status == SyncStatus.SYNCED:
                continue
            if entry.record_id in blocked or not entry.is_due(self._clock()):
                blocked.add(entry.record_id)
                continue

            try:
                await self._deliver(entry)
            except RemotePersistenceError as exc:
                updated = self._record_failure(entry, str(exc))
                self._entries[index] = updated
                blocked.add(entry.record_id)
                if updated.status == SyncStatus.FAILED:
                    failed += 1
                else:
                    retried += 1
                continue

            self._entries[index] = entry.mark_synced(self._clock())
            delivered += 1
            self._record_delivery(entry.operation, "synced")

        if delivered or retried or failed:
            log.info(
                "outbox_drained",
                delivered=delivered,
                retried=retried,
                failed=failed,
            )
        self._prune_synced()
        self.publish_depth()
        return DrainReport(delivered=delivered, retried=retried, failed=failed)

    async def _deliver(self, entry: OutboxEntry) -> None:
        if self._remote is None:
            return
        payload = entry.payload
        if entry.operation == OutboxOperation.INSERT_SUBMISSION:
            assert isinstance(payload, Submission)
            await self._remote.insert_submission(payload)
        elif entry.operation == OutboxOperation.UPDATE_SUBMISSION:
            assert isinstance(payload, Submission)
            await self._remote.update_submission(payload)
        elif entry.operation == OutboxOperation.INSERT_CREDIT:
            assert isinstance(payload, CreditRecord)
            await self._remote.insert_credit(payload)
        elif entry.operation == OutboxOperation.UPDATE_CREDIT:
            assert isinstance(payload, CreditRecord)
            await self._remote.update_credit(payload)

    def _record_failure(self, entry: OutboxEntry, error: str) -> OutboxEntry:
        log = self._log_operation(
            "deliver",
            entry_id=str(entry.id),
            outbox_operation=entry.operation.value,
            record_id=entry.record_id,
            correlation_id=entry.correlation_id,
        )
        attempt = entry.attempts + 1
        if attempt >= self._config.max_attempts:
            log.error("outbox_entry_failed", attempts=attempt, error=error)
            self._record_delivery(entry.operation, "failed")
            return entry.mark_failed(error)

        delay = self.backoff_delay(attempt)
        log.warning(
            "outbox_delivery_retry_scheduled",
            attempt=attempt,
            delay_seconds=round(delay, 3),
            error=error,
        )
        self._record_delivery(entry.operation, "retry")
        return entry.mark_retry(error, delay, self._clock())

    def _prune_synced(self) -> None:
        excess = (
            sum(1 for entry in self._entries if entry.status == SyncStatus.SYNCED)
            - self._config.synced_retention
        )
        if excess <= 0:
            return
        kept: list[OutboxEntry] = []
        for entry in self._entries:
            if excess > 0 and entry.status == SyncStatus.SYNCED:
                excess -= 1
                self._pruned_synced += 1
                continue
            kept.append(entry)
        self._entries = kept

    def _record_delivery(self, operation: OutboxOperation, result: str) -> None:
        if self._metrics is not None:
            self._metrics.record_outbox_delivery(operation.value, result)

    def publish_depth(self) -> None:
        """Push the current summary counts to the outbox depth gauges."""
        if self._metrics is None:
            return
        summary = self.summary()
        self._metrics.set_outbox_depth(SyncStatus.PENDING.value, summary.pending)
        self._metrics.set_outbox_depth(SyncStatus.SYNCED.value, summary.synced)
        self._metrics.set_outbox_depth(SyncStatus.FAILED.value, summary.failed)

    # Background worker

    async def start(self) -> None:
        """Start the background drain loop (idempotent, no-op offline)."""
        if self._running or self.offline:
            return
        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        self._log.info(
            "outbox_worker_started",
            interval_seconds=self._config.drain_interval_seconds,
        )

    async def stop(self) -> None:
        """Stop the background drain loop."""
        if not self._running:
            return
        self._running = False
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        self._log.info("outbox_worker_stopped")

    async def _run_loop(self) -> None:
        interval = self._config.drain_interval_seconds
        while self._running:
            started = time.monotonic()
            try:
                await self.drain()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self._log.error("outbox_drain_cycle_failed", error=str(e))
            elapsed = time.monotonic() - started
            await asyncio.sleep(max(0.0, interval - elapsed))
