"""Submission domain model and lifecycle state machine.

A Submission is a claim of restoration evidence uploaded by a field
member. Its status moves through AI screening, NGO scientific review and
final registry review. Approval is the single trigger for minting a
CreditRecord.

State Machine:
    PENDING -> AI_VERIFIED | AI_FAILED (oracle screening)
    PENDING | AI_VERIFIED | AI_FAILED -> FIELD_CHECK | IN_REVIEW
    FIELD_CHECK <-> IN_REVIEW
    any review status -> NGO_APPROVED | REJECTED (NGO verdict)
    NGO_APPROVED -> APPROVED | REJECTED (final review)

Terminal States:
    APPROVED and REJECTED. Only the audit trail may grow afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum


class EcosystemType(Enum):
    """Coastal ecosystem the evidence documents."""

    MANGROVE = "MANGROVE"
    SEAGRASS = "SEAGRASS"


class SubmissionStatus(Enum):
    """Lifecycle status of a submission.

    States:
        PENDING: Awaiting screening (low or no AI confidence).
        AI_VERIFIED: Oracle confidence at or above the threshold.
        AI_FAILED: Oracle re-screening stayed below the threshold.
        FIELD_CHECK: NGO requested an on-site check.
        IN_REVIEW: NGO scientific review in progress.
        NGO_APPROVED: NGO verdict positive, awaiting final review.
        APPROVED: Final approval; credit minted (terminal).
        REJECTED: Evidence rejected (terminal).
    """

    PENDING = "PENDING"
    AI_VERIFIED = "AI_VERIFIED"
    AI_FAILED = "AI_FAILED"
    FIELD_CHECK = "FIELD_CHECK"
    IN_REVIEW = "IN_REVIEW"
    NGO_APPROVED = "NGO_APPROVED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

    def is_terminal(self) -> bool:
        """Check if this status is final."""
        return self in TERMINAL_STATUSES

    def valid_transitions(self) -> frozenset[SubmissionStatus]:
        """Get valid target statuses from this status.

        Returns:
            Frozenset of reachable statuses. Empty for terminal statuses.
        """
        return STATUS_TRANSITION_MATRIX.get(self, frozenset())


TERMINAL_STATUSES: frozenset[SubmissionStatus] = frozenset(
    {SubmissionStatus.APPROVED, SubmissionStatus.REJECTED}
)

# Statuses shown in the NGO review queue
REVIEW_QUEUE_STATUSES: frozenset[SubmissionStatus] = frozenset(
    {
        SubmissionStatus.PENDING,
        SubmissionStatus.AI_VERIFIED,
        SubmissionStatus.FIELD_CHECK,
        SubmissionStatus.IN_REVIEW,
        SubmissionStatus.AI_FAILED,
    }
)

_NGO_VERDICTS: frozenset[SubmissionStatus] = frozenset(
    {
        SubmissionStatus.FIELD_CHECK,
        SubmissionStatus.IN_REVIEW,
        SubmissionStatus.NGO_APPROVED,
        SubmissionStatus.REJECTED,
    }
)

STATUS_TRANSITION_MATRIX: dict[SubmissionStatus, frozenset[SubmissionStatus]] = {
    SubmissionStatus.PENDING: _NGO_VERDICTS
    | {SubmissionStatus.AI_VERIFIED, SubmissionStatus.AI_FAILED},
    SubmissionStatus.AI_VERIFIED: _NGO_VERDICTS,
    SubmissionStatus.AI_FAILED: _NGO_VERDICTS,
    SubmissionStatus.FIELD_CHECK: _NGO_VERDICTS - {SubmissionStatus.FIELD_CHECK},
    SubmissionStatus.IN_REVIEW: _NGO_VERDICTS - {SubmissionStatus.IN_REVIEW},
    SubmissionStatus.NGO_APPROVED: frozenset(
        {SubmissionStatus.APPROVED, SubmissionStatus.REJECTED}
    ),
    SubmissionStatus.APPROVED: frozenset(),
    SubmissionStatus.REJECTED: frozenset(),
}

# Tonnes CO2e credited per accepted submission, by ecosystem
CREDITS_PER_ECOSYSTEM: dict[EcosystemType, float] = {
    EcosystemType.MANGROVE: 1.5,
    EcosystemType.SEAGRASS: 0.8,
}


def _utc_now() -> datetime:
    """Return current UTC time with timezone info."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True, eq=True)
class GeoPoint:
    """A WGS84 coordinate."""

    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"Latitude out of range: {self.lat}")
        if not -180.0 <= self.lng <= 180.0:
            raise ValueError(f"Longitude out of range: {self.lng}")


@dataclass(frozen=True, eq=True)
class AuditEntry:
    """One append-only audit trail entry.

    Attributes:
        timestamp: When the action happened (UTC).
        action: Short action label, e.g. "Submission Created".
        user: Display name of the acting user.
        note: Free-text note.
    """

    timestamp: datetime
    action: str
    user: str
    note: str


@dataclass(frozen=True, eq=True)
class Submission:
    """A restoration evidence submission.

    Since Submission is frozen, every mutation returns a new instance; the
    record store replaces the old one by id.

    Attributes:
        id: Unique identifier ("sub-..." for locally created records).
        user_id: Owning field member.
        user_name: Owning field member's display name.
        timestamp: Creation time (UTC); None for imported rows without one.
        location: Evidence coordinates.
        region: Region label.
        image_url: Evidence image reference (base64 data URL).
        type: Ecosystem type.
        status: Lifecycle status.
        ai_score: Oracle confidence in [0, 1].
        ai_reasoning: Oracle rationale.
        detected_features: Oracle-detected markers.
        environmental_context: Oracle ecosystem classification.
        google_maps_url: Optional external map reference.
        credits_generated: Credits the submission would mint.
        blockchain_hash: Content hash of the evidence image.
        audit_trail: Ordered, append-only audit log.
        verifier_comments: Latest reviewer comment.
    """

    id: str
    user_id: str
    user_name: str
    type: EcosystemType
    location: GeoPoint
    timestamp: datetime | None = field(default_factory=_utc_now)
    region: str = field(default="")
    image_url: str = field(default="")
    status: SubmissionStatus = field(default=SubmissionStatus.PENDING)
    ai_score: float = field(default=0.0)
    ai_reasoning: str = field(default="")
    detected_features: tuple[str, ...] = field(default=())
    environmental_context: str = field(default="")
    google_maps_url: str | None = field(default=None)
    credits_generated: float | None = field(default=None)
    blockchain_hash: str | None = field(default=None)
    audit_trail: tuple[AuditEntry, ...] = field(default=())
    verifier_comments: str | None = field(default=None)

    def __post_init__(self) -> None:
        """Validate submission fields."""
        if not 0.0 <= self.ai_score <= 1.0:
            raise ValueError(f"ai_score must be within [0, 1], got {self.ai_score}")

    def with_status(
        self,
        new_status: SubmissionStatus,
        verifier_comments: str | None = None,
    ) -> Submission:
        """Create new submission with updated status.

        Enforces the transition matrix.

        Args:
            new_status: The status to transition to.
            verifier_comments: Optional reviewer comment. Existing comments
                are kept when omitted.

        Returns:
            New Submission with the status applied.

        Raises:
            SubmissionFinalizedError: If the submission is already final.
            InvalidStatusTransitionError: If the transition is not allowed.
        """
        # Import here to avoid circular dependency
        from bluecarbon.domain.errors.state_transition import (
            InvalidStatusTransitionError,
            SubmissionFinalizedError,
        )

        if self.status.is_terminal():
            raise SubmissionFinalizedError(
                submission_id=self.id,
                final_status=self.status,
            )

        valid_transitions = self.status.valid_transitions()
        if new_status not in valid_transitions:
            raise InvalidStatusTransitionError(
                from_status=self.status,
                to_status=new_status,
                allowed_transitions=sorted(valid_transitions, key=lambda s: s.value),
            )

        return replace(
            self,
            status=new_status,
            verifier_comments=(
                verifier_comments
                if verifier_comments is not None
                else self.verifier_comments
            ),
        )

    def with_audit_entry(self, entry: AuditEntry) -> Submission:
        """Return a copy with one entry appended to the audit trail."""
        return replace(self, audit_trail=(*self.audit_trail, entry))

    def credit_amount(self, default: float) -> float:
        """Amount to mint on approval; falls back when none was stated."""
        return self.credits_generated or default

    def vintage(self) -> str:
        """Vintage year of the credit this submission mints."""
        created = self.timestamp or _utc_now()
        return str(created.year)
