"""Read-only role projections of the record store.

Each role sees its own slice of the registry:
    - Fisherman: own submissions.
    - NGO: the review queue and the submissions it has reviewed.
    - Admin: everything plus registry totals.
    - Corporate: the credit marketplace and its own credits.
"""

from __future__ import annotations

from dataclasses import dataclass

from bluecarbon.application.services.record_store import RecordStore
from bluecarbon.domain.models.credit_record import CreditRecord, CreditStatus
from bluecarbon.domain.models.submission import (
    REVIEW_QUEUE_STATUSES,
    Submission,
    SubmissionStatus,
)
from bluecarbon.domain.models.user import User, UserRole


@dataclass(frozen=True)
class FishermanView:
    user: User
    submissions: tuple[Submission, ...]
    approved_count: int
    credits_generated: float


@dataclass(frozen=True)
class NgoView:
    user: User
    queue: tuple[Submission, ...]
    history: tuple[Submission, ...]


@dataclass(frozen=True)
class RegistryTotals:
    """Registry-wide summary figures."""

    submissions: int
    approved: int
    in_review: int
    rejected: int
    credits_minted: float
    credits_sold: float
    users: int


@dataclass(frozen=True)
class AdminView:
    user: User
    submissions: tuple[Submission, ...]
    credits: tuple[CreditRecord, ...]
    users: tuple[User, ...]
    totals: RegistryTotals


@dataclass(frozen=True)
class CorporateView:
    user: User
    marketplace: tuple[CreditRecord, ...]
    owned: tuple[CreditRecord, ...]


RoleView = FishermanView | NgoView | AdminView | CorporateView


class RoleViewService:
    """Builds role projections from the current record store."""

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def for_user(self, user: User) -> RoleView:
        """Dispatch to the projection of the user's role."""
        if user.role == UserRole.FISHERMAN:
            return self.fisherman_view(user)
        if user.role == UserRole.NGO:
            return self.ngo_view(user)
        if user.role == UserRole.ADMIN:
            return self.admin_view(user)
        return self.corporate_view(user)

    def fisherman_view(self, user: User) -> FishermanView:
        own = tuple(s for s in self._store.submissions if s.user_id == user.id)
        approved = [s for s in own if s.status == SubmissionStatus.APPROVED]
        return FishermanView(
            user=user,
            submissions=own,
            approved_count=len(approved),
            credits_generated=sum(s.credits_generated or 0.0 for s in approved),
        )

    def ngo_view(self, user: User) -> NgoView:
        submissions = self._store.submissions
        return NgoView(
            user=user,
            queue=tuple(s for s in submissions if s.status in REVIEW_QUEUE_STATUSES),
            history=tuple(
                s
                for s in submissions
                if any(entry.user == user.name for entry in s.audit_trail)
            ),
        )

    def admin_view(self, user: User) -> AdminView:
        return AdminView(
            user=user,
            submissions=self._store.submissions,
            credits=self._store.credits,
            users=self._store.users,
            totals=self.totals(),
        )

    def corporate_view(self, user: User) -> CorporateView:
        credits = self._store.credits
        return CorporateView(
            user=user,
            marketplace=tuple(c for c in credits if c.is_available),
            owned=tuple(c for c in credits if c.owner_id == user.id),
        )

    def totals(self) -> RegistryTotals:
        submissions = self._store.submissions
        credits = self._store.credits

        def count(*statuses: SubmissionStatus) -> int:
            return sum(1 for s in submissions if s.status in statuses)

        return RegistryTotals(
            submissions=len(submissions),
            approved=count(SubmissionStatus.APPROVED),
            in_review=sum(1 for s in submissions if s.status in REVIEW_QUEUE_STATUSES)
            + count(SubmissionStatus.NGO_APPROVED),
            rejected=count(SubmissionStatus.REJECTED),
            credits_minted=sum(c.amount for c in credits),
            credits_sold=sum(
                c.amount for c in credits if c.status == CreditStatus.SOLD
            ),
            users=len(self._store.users),
        )
