"""Remote persistence port.

Mirrors record store mutations to the hosted `submissions` and `credits`
tables and loads them back at start-up.

Rules:
1. LOCAL FIRST - Callers commit locally before any remote call.
2. FAIL LOUD - Adapters raise RemotePersistenceError; the outbox decides
   whether to retry.
3. NEWEST FIRST - fetch_submissions orders by creation timestamp desc.
"""

from __future__ import annotations

from typing import Protocol

from bluecarbon.domain.models.credit_record import CreditRecord
from bluecarbon.domain.models.submission import Submission


class RemotePersistenceProtocol(Protocol):
    """Protocol for the hosted table store.

    Methods:
        insert_submission: Insert a new submission row
        insert_credit: Insert a new credit row
        update_submission: Overwrite a submission row by id
        update_credit: Overwrite a credit row by id
        fetch_submissions: Read all submissions, newest first
        fetch_credits: Read all credits
    """

    async def insert_submission(self, submission: Submission) -> None:
        """Insert a submission row.

        Raises:
            RemotePersistenceError: If the remote call fails.
        """
        ...

    async def insert_credit(self, credit: CreditRecord) -> None:
        """Insert a credit row.

        Raises:
            RemotePersistenceError: If the remote call fails.
        """
        ...

    async def update_submission(self, submission: Submission) -> None:
        """Update the submission row matching submission.id.

        Raises:
            RemotePersistenceError: If the remote call fails.
        """
        ...

    async def update_credit(self, credit: CreditRecord) -> None:
        """Update the credit row matching credit.id.

        Raises:
            RemotePersistenceError: If the remote call fails.
        """
        ...

    async def fetch_submissions(self) -> list[Submission]:
        """Read all submissions ordered newest first.

        Raises:
            RemotePersistenceError: If the remote call fails.
        """
        ...

    async def fetch_credits(self) -> list[CreditRecord]:
        """Read all credits.

        Raises:
            RemotePersistenceError: If the remote call fails.
        """
        ...
