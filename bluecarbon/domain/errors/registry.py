"""Registry errors for submissions, credits and users."""

from __future__ import annotations

from bluecarbon.domain.exceptions import BlueCarbonError


class RecordNotFoundError(BlueCarbonError):
    """Raised when a record id is not present in the record store.

    Attributes:
        kind: Record kind ("submission", "credit" or "user").
        record_id: The identifier that was looked up.
    """

    def __init__(self, kind: str, record_id: str) -> None:
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind.capitalize()} not found: {record_id}")


class CreditAlreadySoldError(BlueCarbonError):
    """Raised when a purchase targets a credit that is already SOLD."""

    def __init__(self, credit_id: str, owner_id: str | None) -> None:
        self.credit_id = credit_id
        self.owner_id = owner_id
        super().__init__(f"Credit {credit_id} already sold to {owner_id}")


class CreditAlreadyMintedError(BlueCarbonError):
    """Raised when a second credit would be minted for one submission.

    Attributes:
        submission_id: The originating submission.
        credit_id: The credit that already exists for it.
    """

    def __init__(self, submission_id: str, credit_id: str) -> None:
        self.submission_id = submission_id
        self.credit_id = credit_id
        super().__init__(
            f"Submission {submission_id} already minted credit {credit_id}"
        )


class SubmissionNotEligibleError(BlueCarbonError):
    """Raised when an operation needs a submission in a different status."""

    def __init__(self, submission_id: str, reason: str) -> None:
        self.submission_id = submission_id
        self.reason = reason
        super().__init__(f"Submission {submission_id} not eligible: {reason}")
