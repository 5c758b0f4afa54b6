"""Registry sync service: start-up hydration and on-demand refresh.

On start-up the record store is loaded from the hosted tables when the
remote store is configured and reachable; otherwise the process runs
offline from its seeded users. A refresh re-reads both tables and merges
them into the store, local records winning.
"""

from __future__ import annotations

from dataclasses import dataclass

from bluecarbon.application.ports.remote_persistence import RemotePersistenceProtocol
from bluecarbon.application.services.base import LoggingMixin
from bluecarbon.application.services.persistence_outbox import (
    MODE_OFFLINE,
    MODE_ONLINE,
    PersistenceOutbox,
)
from bluecarbon.application.services.record_store import MergeReport, RecordStore
from bluecarbon.domain.errors.persistence import (
    PersistenceNotConfiguredError,
    RemotePersistenceError,
)


@dataclass(frozen=True)
class HydrationResult:
    """Outcome of start-up hydration."""

    mode: str
    submissions: int
    credits: int
    error: str | None = None


class RegistrySyncService(LoggingMixin):
    """Loads and refreshes the record store from the hosted tables."""

    def __init__(
        self,
        store: RecordStore,
        outbox: PersistenceOutbox,
        remote: RemotePersistenceProtocol | None,
    ) -> None:
        self._store = store
        self._outbox = outbox
        self._remote = remote
        self._init_logger(component="persistence")

    async def hydrate(self) -> HydrationResult:
        """Load both collections at start-up.

        An unreachable store is logged and leaves the record store as
        seeded. It never raises.
        """
        log = self._log_operation("hydrate")
        if self._remote is None:
            log.info("registry_offline_mode")
            return HydrationResult(mode=MODE_OFFLINE, submissions=0, credits=0)

        try:
            submissions = await self._remote.fetch_submissions()
            credits = await self._remote.fetch_credits()
        except RemotePersistenceError as exc:
            log.warning("registry_hydration_failed", error=str(exc))
            return HydrationResult(
                mode=MODE_ONLINE,
                submissions=len(self._store.submissions),
                credits=len(self._store.credits),
                error=str(exc),
            )

        self._store.hydrate(submissions, credits)
        loaded_credits = len(self._store.credits)
        log.info(
            "registry_hydrated",
            submissions=len(submissions),
            credits=loaded_credits,
            credits_skipped=len(credits) - loaded_credits,
        )
        return HydrationResult(
            mode=MODE_ONLINE, submissions=len(submissions), credits=loaded_credits
        )

    async def refresh(self) -> MergeReport:
        """Drain pending writes, then merge the remote tables into the store.

        Raises:
            PersistenceNotConfiguredError: In offline mode.
            RemotePersistenceError: If a bulk read fails.
        """
        if self._remote is None:
            raise PersistenceNotConfiguredError()

        log = self._log_operation("refresh")
        await self._outbox.drain()
        submissions = await self._remote.fetch_submissions()
        credits = await self._remote.fetch_credits()
        report = self._store.merge_remote(submissions, credits)
        log.info(
            "registry_refreshed",
            submissions_added=report.submissions_added,
            credits_added=report.credits_added,
            credits_skipped=report.credits_skipped,
        )
        return report
