"""In-memory record store.

The record store is the authoritative state of a running process:
submissions (most recent first), credit records (in mint order) and
users. Only the lifecycle controller and the sync service mutate it.

Ordering:
    Submissions are kept sorted by creation timestamp, newest first. The
    sort is stable, so a newly inserted submission stays ahead of older
    entries sharing its timestamp. Submissions without a timestamp sort
    last.

Remote rows:
    A remote credit is only accepted when its submission is in the store,
    is APPROVED and has no credit yet. Other credits are logged and
    skipped.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone

from bluecarbon.application.services.base import LoggingMixin
from bluecarbon.domain.errors.registry import (
    CreditAlreadyMintedError,
    RecordNotFoundError,
)
from bluecarbon.domain.models.credit_record import CreditRecord
from bluecarbon.domain.models.submission import Submission, SubmissionStatus
from bluecarbon.domain.models.user import User

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _created_at(submission: Submission) -> datetime:
    return submission.timestamp or _OLDEST


def _newest_first(submissions: Iterable[Submission]) -> list[Submission]:
    return sorted(submissions, key=_created_at, reverse=True)


@dataclass(frozen=True)
class MergeReport:
    """Counts of remote-only records added by a merge."""

    submissions_added: int
    credits_added: int
    credits_skipped: int = 0


class RecordStore(LoggingMixin):
    """Authoritative in-memory state for submissions, credits and users."""

    def __init__(
        self,
        users: Iterable[User] = (),
        submissions: Iterable[Submission] = (),
        credits: Iterable[CreditRecord] = (),
    ) -> None:
        self._users: dict[str, User] = {user.id: user for user in users}
        self._submissions: list[Submission] = _newest_first(submissions)
        self._credits: list[CreditRecord] = list(credits)
        self._init_logger(component="store")

    @property
    def submissions(self) -> tuple[Submission, ...]:
        return tuple(self._submissions)

    @property
    def credits(self) -> tuple[CreditRecord, ...]:
        return tuple(self._credits)

    @property
    def users(self) -> tuple[User, ...]:
        return tuple(self._users.values())

    # Lookups

    def get_submission(self, submission_id: str) -> Submission | None:
        for submission in self._submissions:
            if submission.id == submission_id:
                return submission
        return None

    def get_credit(self, credit_id: str) -> CreditRecord | None:
        for credit in self._credits:
            if credit.id == credit_id:
                return credit
        return None

    def get_user(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    def credit_for_submission(self, submission_id: str) -> CreditRecord | None:
        """The credit minted for a submission, if any."""
        for credit in self._credits:
            if credit.submission_id == submission_id:
                return credit
        return None

    # Mutations

    def add_submission(self, submission: Submission) -> None:
        """Insert a submission at the head of the list."""
        self._submissions = _newest_first([submission, *self._submissions])

    def replace_submission(self, submission: Submission) -> None:
        """Replace the stored submission with the same id.

        Raises:
            RecordNotFoundError: If no submission has that id.
        """
        for index, existing in enumerate(self._submissions):
            if existing.id == submission.id:
                self._submissions[index] = submission
                return
        raise RecordNotFoundError("submission", submission.id)

    def add_credit(self, credit: CreditRecord) -> None:
        """Append a minted credit.

        Raises:
            CreditAlreadyMintedError: If the submission already has a credit.
        """
        existing = self.credit_for_submission(credit.submission_id)
        if existing is not None:
            raise CreditAlreadyMintedError(
                submission_id=credit.submission_id, credit_id=existing.id
            )
        self._credits.append(credit)

    def replace_credit(self, credit: CreditRecord) -> None:
        """Replace the stored credit with the same id.

        Raises:
            RecordNotFoundError: If no credit has that id.
        """
        for index, existing in enumerate(self._credits):
            if existing.id == credit.id:
                self._credits[index] = credit
                return
        raise RecordNotFoundError("credit", credit.id)

    def replace_user(self, user: User) -> None:
        """Replace a stored user.

        Raises:
            RecordNotFoundError: If no user has that id.
        """
        if user.id not in self._users:
            raise RecordNotFoundError("user", user.id)
        self._users[user.id] = user

    # Remote reconciliation

    def hydrate(
        self,
        submissions: Iterable[Submission],
        credits: Iterable[CreditRecord],
    ) -> None:
        """Replace both collections with rows loaded at start-up."""
        self._submissions = _newest_first(submissions)
        self._credits = []
        known_credits: set[str] = set()
        for credit in credits:
            if credit.id not in known_credits and self._accepts_remote_credit(
                credit, "hydrate"
            ):
                self._credits.append(credit)
                known_credits.add(credit.id)

    def merge_remote(
        self,
        submissions: Iterable[Submission],
        credits: Iterable[CreditRecord],
    ) -> MergeReport:
        """Merge remote rows by id; local records always win.

        Remote-only records are added and nothing local is dropped.
        """
        known_submissions = {s.id for s in self._submissions}
        new_submissions = [s for s in submissions if s.id not in known_submissions]
        if new_submissions:
            self._submissions = _newest_first([*self._submissions, *new_submissions])

        known_credits = {c.id for c in self._credits}
        credits_added = credits_skipped = 0
        for credit in credits:
            if credit.id in known_credits:
                continue
            if not self._accepts_remote_credit(credit, "merge_remote"):
                credits_skipped += 1
                continue
            self._credits.append(credit)
            known_credits.add(credit.id)
            credits_added += 1

        return MergeReport(
            submissions_added=len(new_submissions),
            credits_added=credits_added,
            credits_skipped=credits_skipped,
        )

    def _accepts_remote_credit(self, credit: CreditRecord, operation: str) -> bool:
        submission = self.get_submission(credit.submission_id)
        if submission is None:
            reason = "unknown_submission"
        elif submission.status != SubmissionStatus.APPROVED:
            reason = "submission_not_approved"
        elif self.credit_for_submission(credit.submission_id) is not None:
            reason = "already_minted"
        else:
            return True
        self._log_operation(operation).warning(
            "remote_credit_skipped",
            credit_id=credit.id,
            submission_id=credit.submission_id,
            reason=reason,
        )
        return False
