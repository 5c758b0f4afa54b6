"""Unit tests for PersistenceOutbox delivery, backoff and sync status."""

from __future__ import annotations

import random
from contextvars import copy_context
from datetime import datetime, timezone

import pytest

from bluecarbon.application.services.persistence_outbox import (
    MODE_OFFLINE,
    MODE_ONLINE,
    PersistenceOutbox,
)
from bluecarbon.config.outbox_config import TEST_OUTBOX_CONFIG, OutboxConfig
from bluecarbon.domain.models.credit_record import CreditRecord
from bluecarbon.domain.models.outbox import OutboxOperation, SyncStatus
from bluecarbon.domain.models.submission import (
    EcosystemType,
    GeoPoint,
    Submission,
    SubmissionStatus,
)
from bluecarbon.infrastructure.monitoring.metrics import MetricsCollector
from bluecarbon.infrastructure.observability.correlation import set_correlation_id
from bluecarbon.infrastructure.stubs import RemotePersistenceStub
from tests.helpers import FakeClock


def _submission(id: str = "sub-1") -> Submission:
    return Submission(
        id=id,
        user_id="u-fisherman-1",
        user_name="Wayan",
        type=EcosystemType.MANGROVE,
        location=GeoPoint(lat=-8.4, lng=115.2),
        timestamp=datetime(2026, 2, 1, tzinfo=timezone.utc),
    )


def _credit(id: str = "c-1", submission_id: str = "sub-1") -> CreditRecord:
    return CreditRecord(id=id, submission_id=submission_id, amount=1.5, vintage="2026")


class TestEnqueue:
    """Tests for enqueue() and sync status reporting."""

    def test_entry_recorded_pending(self, outbox: PersistenceOutbox) -> None:
        entry = outbox.enqueue(OutboxOperation.INSERT_SUBMISSION, _submission())

        assert entry is not None
        assert entry.status == SyncStatus.PENDING
        assert outbox.get_entry(entry.id) == entry
        assert outbox.summary().pending == 1
        assert outbox.mode == MODE_ONLINE

    def test_offline_mode_records_nothing(self) -> None:
        outbox = PersistenceOutbox(None, config=TEST_OUTBOX_CONFIG)

        entry = outbox.enqueue(OutboxOperation.INSERT_SUBMISSION, _submission())

        assert entry is None
        assert outbox.offline
        assert outbox.entries() == []
        assert outbox.summary().mode == MODE_OFFLINE

    def test_entry_keeps_request_correlation_id(
        self, outbox: PersistenceOutbox
    ) -> None:
        def enqueue_during_request():
            set_correlation_id("req-7f3a")
            return outbox.enqueue(OutboxOperation.INSERT_SUBMISSION, _submission())

        entry = copy_context().run(enqueue_during_request)

        assert entry.correlation_id == "req-7f3a"

    def test_entry_outside_request_has_no_correlation_id(
        self, outbox: PersistenceOutbox
    ) -> None:
        entry = copy_context().run(
            outbox.enqueue, OutboxOperation.INSERT_CREDIT, _credit()
        )

        assert entry.correlation_id is None

    @pytest.mark.asyncio
    async def test_offline_drain_is_a_no_op(self) -> None:
        outbox = PersistenceOutbox(None, config=TEST_OUTBOX_CONFIG)

        report = await outbox.drain()

        assert (report.delivered, report.retried, report.failed) == (0, 0, 0)


class TestDrain:
    """Tests for drain() delivery."""

    @pytest.mark.asyncio
    async def test_entries_delivered_in_enqueue_order(
        self, outbox: PersistenceOutbox, remote: RemotePersistenceStub
    ) -> None:
        submission = _submission()
        outbox.enqueue(OutboxOperation.INSERT_SUBMISSION, submission)
        outbox.enqueue(OutboxOperation.INSERT_CREDIT, _credit())
        outbox.enqueue(
            OutboxOperation.UPDATE_SUBMISSION,
            submission.with_status(SubmissionStatus.IN_REVIEW),
        )

        report = await outbox.drain()

        assert report.delivered == 3
        assert [c.operation for c in remote.calls] == [
            "insert_submission",
            "insert_credit",
            "update_submission",
        ]
        assert remote.submission_rows["sub-1"]["status"] == "IN_REVIEW"
        assert outbox.summary().synced == 3

    @pytest.mark.asyncio
    async def test_failed_attempt_rescheduled_with_backoff(
        self,
        outbox: PersistenceOutbox,
        remote: RemotePersistenceStub,
        clock: FakeClock,
    ) -> None:
        remote.fail_next(1)
        entry = outbox.enqueue(OutboxOperation.INSERT_SUBMISSION, _submission())

        report = await outbox.drain()

        assert report.retried == 1
        pending = outbox.get_entry(entry.id)
        assert pending.status == SyncStatus.PENDING
        assert pending.attempts == 1
        assert "injected failure" in pending.last_error
        assert (pending.next_attempt_at - clock()).total_seconds() == pytest.approx(
            TEST_OUTBOX_CONFIG.backoff_base_seconds
        )

    @pytest.mark.asyncio
    async def test_entry_not_retried_before_due(
        self,
        outbox: PersistenceOutbox,
        remote: RemotePersistenceStub,
        clock: FakeClock,
    ) -> None:
        remote.fail_next(1)
        entry = outbox.enqueue(OutboxOperation.INSERT_SUBMISSION, _submission())
        await outbox.drain()

        early = await outbox.drain()
        clock.advance(seconds=1)
        later = await outbox.drain()

        assert early.delivered == 0
        assert later.delivered == 1
        assert outbox.get_entry(entry.id).status == SyncStatus.SYNCED
        assert outbox.get_entry(entry.id).attempts == 2

    @pytest.mark.asyncio
    async def test_entry_failed_after_max_attempts(
        self,
        outbox: PersistenceOutbox,
        remote: RemotePersistenceStub,
        clock: FakeClock,
    ) -> None:
        remote.set_unavailable()
        entry = outbox.enqueue(OutboxOperation.INSERT_CREDIT, _credit())

        for _ in range(TEST_OUTBOX_CONFIG.max_attempts):
            await outbox.drain()
            clock.advance(seconds=1)

        failed = outbox.get_entry(entry.id)
        assert failed.status == SyncStatus.FAILED
        assert failed.attempts == TEST_OUTBOX_CONFIG.max_attempts
        assert outbox.summary().failed == 1
        assert len(remote.calls_for("insert_credit")) == TEST_OUTBOX_CONFIG.max_attempts

        await outbox.drain()
        assert len(remote.calls_for("insert_credit")) == TEST_OUTBOX_CONFIG.max_attempts

    @pytest.mark.asyncio
    async def test_later_writes_wait_for_earlier_write_of_same_record(
        self,
        outbox: PersistenceOutbox,
        remote: RemotePersistenceStub,
    ) -> None:
        submission = _submission()
        outbox.enqueue(OutboxOperation.INSERT_SUBMISSION, submission)
        update = outbox.enqueue(
            OutboxOperation.UPDATE_SUBMISSION,
            submission.with_status(SubmissionStatus.FIELD_CHECK),
        )
        other = outbox.enqueue(OutboxOperation.INSERT_SUBMISSION, _submission("sub-2"))
        remote.fail_next(1)

        report = await outbox.drain()

        assert report.retried == 1
        assert report.delivered == 1
        assert outbox.get_entry(update.id).attempts == 0
        assert outbox.get_entry(other.id).status == SyncStatus.SYNCED
        assert remote.calls_for("update_submission") == []

    @pytest.mark.asyncio
    async def test_retry_failed_requeues_and_delivers(
        self,
        outbox: PersistenceOutbox,
        remote: RemotePersistenceStub,
        clock: FakeClock,
    ) -> None:
        remote.set_unavailable()
        entry = outbox.enqueue(OutboxOperation.INSERT_SUBMISSION, _submission())
        for _ in range(TEST_OUTBOX_CONFIG.max_attempts):
            await outbox.drain()
            clock.advance(seconds=1)
        remote.set_unavailable(False)

        requeued = outbox.retry_failed()
        report = await outbox.drain()

        assert requeued == 1
        assert report.delivered == 1
        assert outbox.get_entry(entry.id).status == SyncStatus.SYNCED
        assert "sub-1" in remote.submission_rows

    @pytest.mark.asyncio
    async def test_retry_failed_by_id_only_touches_that_entry(
        self,
        outbox: PersistenceOutbox,
        remote: RemotePersistenceStub,
        clock: FakeClock,
    ) -> None:
        remote.set_unavailable()
        first = outbox.enqueue(OutboxOperation.INSERT_SUBMISSION, _submission("a"))
        second = outbox.enqueue(OutboxOperation.INSERT_SUBMISSION, _submission("b"))
        for _ in range(TEST_OUTBOX_CONFIG.max_attempts):
            await outbox.drain()
            clock.advance(seconds=1)

        requeued = outbox.retry_failed(second.id)

        assert requeued == 1
        assert outbox.get_entry(first.id).status == SyncStatus.FAILED
        assert outbox.get_entry(second.id).status == SyncStatus.PENDING


class TestBackoff:
    """Tests for backoff_delay()."""

    def test_delay_doubles_up_to_ceiling(self) -> None:
        outbox = PersistenceOutbox(
            RemotePersistenceStub(),
            config=OutboxConfig(
                backoff_base_seconds=2.0, backoff_max_seconds=10.0, jitter_ratio=0.0
            ),
        )

        delays = [outbox.backoff_delay(attempt) for attempt in range(1, 6)]

        assert delays == [2.0, 4.0, 8.0, 10.0, 10.0]

    def test_jitter_bounded_by_ratio(self) -> None:
        outbox = PersistenceOutbox(
            RemotePersistenceStub(),
            config=OutboxConfig(backoff_base_seconds=4.0, jitter_ratio=0.25),
            rng=random.Random(3),
        )

        for _ in range(20):
            assert 4.0 <= outbox.backoff_delay(1) <= 5.0


class TestMetrics:
    """Tests for outbox metrics publication."""

    @pytest.mark.asyncio
    async def test_depth_gauge_tracks_status(
        self,
        outbox: PersistenceOutbox,
        metrics: MetricsCollector,
    ) -> None:
        outbox.enqueue(OutboxOperation.INSERT_SUBMISSION, _submission())

        await outbox.drain()

        registry = metrics.get_registry()
        labels = metrics._labels()
        synced = registry.get_sample_value(
            "outbox_entries", {"status": "SYNCED", **labels}
        )
        delivered = registry.get_sample_value(
            "outbox_deliveries_total",
            {"operation": "INSERT_SUBMISSION", "result": "synced", **labels},
        )
        assert synced == 1.0
        assert delivered == 1.0


class TestWorker:
    """Tests for the background drain loop."""

    @pytest.mark.asyncio
    async def test_start_and_stop(self, outbox: PersistenceOutbox) -> None:
        await outbox.start()
        assert outbox.running

        await outbox.stop()
        assert not outbox.running

    @pytest.mark.asyncio
    async def test_start_is_no_op_offline(self) -> None:
        outbox = PersistenceOutbox(None, config=TEST_OUTBOX_CONFIG)

        await outbox.start()

        assert not outbox.running


class TestRetention:
    """Tests for dropping delivered entries."""

    @pytest.mark.asyncio
    async def test_synced_entry_drops_payload(
        self, outbox: PersistenceOutbox, remote: RemotePersistenceStub
    ) -> None:
        entry = outbox.enqueue(OutboxOperation.INSERT_SUBMISSION, _submission())

        await outbox.drain()

        synced = outbox.get_entry(entry.id)
        assert synced.status == SyncStatus.SYNCED
        assert synced.payload is None
        assert "sub-1" in remote.submission_rows

    @pytest.mark.asyncio
    async def test_only_newest_synced_entries_kept(
        self, remote: RemotePersistenceStub, clock: FakeClock
    ) -> None:
        outbox = PersistenceOutbox(
            remote,
            config=OutboxConfig(jitter_ratio=0.0, synced_retention=3),
            clock=clock,
        )
        for index in range(50):
            outbox.enqueue(OutboxOperation.INSERT_SUBMISSION, _submission(f"sub-{index}"))
            await outbox.drain()

        assert [e.record_id for e in outbox.entries()] == ["sub-47", "sub-48", "sub-49"]
        summary = outbox.summary()
        assert (summary.pending, summary.synced, summary.failed) == (0, 50, 0)

    @pytest.mark.asyncio
    async def test_pending_and_failed_entries_never_pruned(
        self, remote: RemotePersistenceStub, clock: FakeClock
    ) -> None:
        outbox = PersistenceOutbox(
            remote,
            config=OutboxConfig(max_attempts=1, jitter_ratio=0.0, synced_retention=0),
            clock=clock,
        )
        remote.set_unavailable()
        failed = outbox.enqueue(OutboxOperation.INSERT_CREDIT, _credit())
        await outbox.drain()
        remote.set_unavailable(False)
        outbox.enqueue(OutboxOperation.INSERT_SUBMISSION, _submission("sub-ok"))

        await outbox.drain()

        assert [e.id for e in outbox.entries()] == [failed.id]
        assert outbox.get_entry(failed.id).payload == _credit()
        assert outbox.summary().synced == 1
