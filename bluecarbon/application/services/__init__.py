"""Application services for the Blue Carbon registry."""

from bluecarbon.application.services.content_hash_service import (
    Blake3ContentHashService,
)
from bluecarbon.application.services.lifecycle_controller import (
    CommandOutcome,
    CommandResult,
    SubmissionLifecycleController,
)
from bluecarbon.application.services.persistence_outbox import (
    DrainReport,
    OutboxSummary,
    PersistenceOutbox,
)
from bluecarbon.application.services.record_store import MergeReport, RecordStore
from bluecarbon.application.services.registry_sync_service import (
    HydrationResult,
    RegistrySyncService,
)
from bluecarbon.application.services.role_views import RoleViewService

__all__: list[str] = [
    "Blake3ContentHashService",
    "CommandOutcome",
    "CommandResult",
    "DrainReport",
    "HydrationResult",
    "MergeReport",
    "OutboxSummary",
    "PersistenceOutbox",
    "RecordStore",
    "RegistrySyncService",
    "RoleViewService",
    "SubmissionLifecycleController",
]
