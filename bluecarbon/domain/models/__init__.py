"""Domain models for the Blue Carbon registry.

Contains value objects and domain models that represent core registry
concepts. These models are immutable and contain no infrastructure
dependencies.
"""

from bluecarbon.domain.models.credit_record import CreditRecord, CreditStatus
from bluecarbon.domain.models.outbox import OutboxEntry, OutboxOperation, SyncStatus
from bluecarbon.domain.models.submission import (
    AuditEntry,
    EcosystemType,
    GeoPoint,
    Submission,
    SubmissionStatus,
)
from bluecarbon.domain.models.user import User, UserRole, UserStatus
from bluecarbon.domain.models.verification import VerificationVerdict

__all__: list[str] = [
    "AuditEntry",
    "CreditRecord",
    "CreditStatus",
    "EcosystemType",
    "GeoPoint",
    "OutboxEntry",
    "OutboxOperation",
    "Submission",
    "SubmissionStatus",
    "SyncStatus",
    "User",
    "UserRole",
    "UserStatus",
    "VerificationVerdict",
]
