"""In-memory stub of the remote persistence port.

Stores wire-format rows (through the same codec as the Supabase adapter)
so hydration and refresh behave as against the hosted tables.

Testing Features:
- Failure injection: fail the next N calls, or go unavailable
- Call log for assertions
- Seeding of remote-only rows
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from bluecarbon.application.ports.remote_persistence import RemotePersistenceProtocol
from bluecarbon.domain.errors.persistence import RemotePersistenceError
from bluecarbon.domain.models.credit_record import CreditRecord
from bluecarbon.domain.models.submission import Submission
from bluecarbon.infrastructure.adapters.persistence.record_codec import (
    credit_to_row,
    row_to_credit,
    row_to_submission,
    submission_to_row,
)
from bluecarbon.infrastructure.adapters.persistence.supabase_persistence import (
    CREDITS_TABLE,
    SUBMISSIONS_TABLE,
)


@dataclass(frozen=True)
class RemoteCall:
    """Record of a remote call for test assertions."""

    operation: str
    table: str
    record_id: str | None


class RemotePersistenceStub(RemotePersistenceProtocol):
    """In-memory hosted store. NOT suitable for production use.

    Attributes:
        submission_rows: Rows keyed by submission id.
        credit_rows: Rows keyed by credit id.
        calls: Every call made, in order (failed ones included).
    """

    def __init__(self) -> None:
        self.submission_rows: dict[str, dict[str, Any]] = {}
        self.credit_rows: dict[str, dict[str, Any]] = {}
        self.calls: list[RemoteCall] = []
        self._failures_remaining = 0
        self._unavailable = False

    # Failure injection

    def fail_next(self, count: int = 1) -> None:
        """Make the next `count` calls raise RemotePersistenceError."""
        self._failures_remaining = count

    def set_unavailable(self, unavailable: bool = True) -> None:
        """Make every call fail until reset."""
        self._unavailable = unavailable

    def seed_submission(self, submission: Submission) -> None:
        self.submission_rows[submission.id] = submission_to_row(submission)

    def seed_credit(self, credit: CreditRecord) -> None:
        self.credit_rows[credit.id] = credit_to_row(credit)

    def calls_for(self, operation: str) -> list[RemoteCall]:
        return [call for call in self.calls if call.operation == operation]

    def _check(self, operation: str, table: str, record_id: str | None) -> None:
        self.calls.append(RemoteCall(operation, table, record_id))
        if self._unavailable:
            raise RemotePersistenceError(operation, table, "unavailable", record_id)
        if self._failures_remaining > 0:
            self._failures_remaining -= 1
            raise RemotePersistenceError(operation, table, "injected failure", record_id)

    # Port implementation

    async def insert_submission(self, submission: Submission) -> None:
        self._check("insert_submission", SUBMISSIONS_TABLE, submission.id)
        if submission.id in self.submission_rows:
            raise RemotePersistenceError(
                "insert_submission", SUBMISSIONS_TABLE, "duplicate key", submission.id
            )
        self.submission_rows[submission.id] = submission_to_row(submission)

    async def insert_credit(self, credit: CreditRecord) -> None:
        self._check("insert_credit", CREDITS_TABLE, credit.id)
        if credit.id in self.credit_rows:
            raise RemotePersistenceError(
                "insert_credit", CREDITS_TABLE, "duplicate key", credit.id
            )
        self.credit_rows[credit.id] = credit_to_row(credit)

    async def update_submission(self, submission: Submission) -> None:
        self._check("update_submission", SUBMISSIONS_TABLE, submission.id)
        # An update matching no row is a silent no-op, as in PostgREST
        if submission.id in self.submission_rows:
            self.submission_rows[submission.id] = submission_to_row(submission)

    async def update_credit(self, credit: CreditRecord) -> None:
        self._check("update_credit", CREDITS_TABLE, credit.id)
        if credit.id in self.credit_rows:
            self.credit_rows[credit.id] = credit_to_row(credit)

    async def fetch_submissions(self) -> list[Submission]:
        self._check("fetch_submissions", SUBMISSIONS_TABLE, None)
        submissions = [row_to_submission(row) for row in self.submission_rows.values()]
        return sorted(
            submissions,
            key=lambda s: s.timestamp.isoformat() if s.timestamp else "",
            reverse=True,
        )

    async def fetch_credits(self) -> list[CreditRecord]:
        self._check("fetch_credits", CREDITS_TABLE, None)
        return [row_to_credit(row) for row in self.credit_rows.values()]
