"""Supabase implementation of the remote persistence port.

The supabase client is synchronous; every call runs in a worker thread
via asyncio.to_thread so the event loop is never blocked. Any client
error is raised as RemotePersistenceError for the outbox to retry.

Usage:
    from supabase import create_client

    client = create_client(settings.supabase_url, settings.supabase_key)
    remote = SupabasePersistenceAdapter(client)
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

from supabase import Client as SupabaseClient

from bluecarbon.application.services.base import LoggingMixin
from bluecarbon.domain.errors.persistence import RemotePersistenceError
from bluecarbon.domain.models.credit_record import CreditRecord
from bluecarbon.domain.models.submission import Submission
from bluecarbon.infrastructure.adapters.persistence.record_codec import (
    credit_to_row,
    row_to_credit,
    row_to_submission,
    submission_to_row,
)

SUBMISSIONS_TABLE = "submissions"
CREDITS_TABLE = "credits"


class SupabasePersistenceAdapter(LoggingMixin):
    """Mirrors registry records to the hosted Supabase tables.

    Attributes:
        _client: Supabase client for table operations.
    """

    def __init__(self, client: SupabaseClient) -> None:
        """Initialize the adapter.

        Args:
            client: Supabase client instance.
        """
        self._client = client
        self._init_logger(component="persistence")

    @staticmethod
    def _coerce_rows(data: object) -> list[dict[str, Any]]:
        """Normalize Supabase response payloads to a list of row dicts."""
        if not isinstance(data, list):
            return []
        return [row for row in data if isinstance(row, dict)]

    async def _execute(
        self,
        operation: str,
        table: str,
        call: Callable[[], Any],
        record_id: str | None = None,
    ) -> Any:
        try:
            return await asyncio.to_thread(call)
        except Exception as e:
            raise RemotePersistenceError(
                operation=operation,
                table=table,
                message=str(e),
                record_id=record_id,
            ) from e

    async def insert_submission(self, submission: Submission) -> None:
        row = submission_to_row(submission)
        await self._execute(
            "insert",
            SUBMISSIONS_TABLE,
            lambda: self._client.table(SUBMISSIONS_TABLE).insert(row).execute(),
            record_id=submission.id,
        )
        self._log_operation("insert_submission", submission_id=submission.id).debug(
            "submission_row_inserted"
        )

    async def insert_credit(self, credit: CreditRecord) -> None:
        row = credit_to_row(credit)
        await self._execute(
            "insert",
            CREDITS_TABLE,
            lambda: self._client.table(CREDITS_TABLE).insert(row).execute(),
            record_id=credit.id,
        )
        self._log_operation("insert_credit", credit_id=credit.id).debug(
            "credit_row_inserted"
        )

    async def update_submission(self, submission: Submission) -> None:
        changes = submission_to_row(submission)
        changes.pop("id")
        await self._execute(
            "update",
            SUBMISSIONS_TABLE,
            lambda: self._client.table(SUBMISSIONS_TABLE)
            .update(changes)
            .eq("id", submission.id)
            .execute(),
            record_id=submission.id,
        )
        self._log_operation("update_submission", submission_id=submission.id).debug(
            "submission_row_updated", status=submission.status.value
        )

    async def update_credit(self, credit: CreditRecord) -> None:
        changes = credit_to_row(credit)
        changes.pop("id")
        await self._execute(
            "update",
            CREDITS_TABLE,
            lambda: self._client.table(CREDITS_TABLE)
            .update(changes)
            .eq("id", credit.id)
            .execute(),
            record_id=credit.id,
        )
        self._log_operation("update_credit", credit_id=credit.id).debug(
            "credit_row_updated", status=credit.status.value
        )

    async def fetch_submissions(self) -> list[Submission]:
        """Read all submissions, newest first. Undecodable rows are skipped."""
        log = self._log_operation("fetch_submissions")
        result = await self._execute(
            "select",
            SUBMISSIONS_TABLE,
            lambda: self._client.table(SUBMISSIONS_TABLE)
            .select("*")
            .order("timestamp", desc=True)
            .execute(),
        )

        submissions: list[Submission] = []
        for row in self._coerce_rows(result.data):
            try:
                submissions.append(row_to_submission(row))
            except (KeyError, TypeError, ValueError) as e:
                log.warning("submission_row_skipped", row_id=row.get("id"), error=str(e))
        log.debug("submissions_fetched", count=len(submissions))
        return submissions

    async def fetch_credits(self) -> list[CreditRecord]:
        """Read all credits. Undecodable rows are skipped."""
        log = self._log_operation("fetch_credits")
        result = await self._execute(
            "select",
            CREDITS_TABLE,
            lambda: self._client.table(CREDITS_TABLE).select("*").execute(),
        )

        credits: list[CreditRecord] = []
        for row in self._coerce_rows(result.data):
            try:
                credits.append(row_to_credit(row))
            except (KeyError, TypeError, ValueError) as e:
                log.warning("credit_row_skipped", row_id=row.get("id"), error=str(e))
        log.debug("credits_fetched", count=len(credits))
        return credits
