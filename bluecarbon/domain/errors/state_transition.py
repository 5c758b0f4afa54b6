"""State transition errors for the submission lifecycle.

Raised by the Submission model when a status change falls outside the
transition table or targets a submission that has already reached a
final status.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from bluecarbon.domain.exceptions import BlueCarbonError

if TYPE_CHECKING:
    from bluecarbon.domain.models.submission import SubmissionStatus


class InvalidStatusTransitionError(BlueCarbonError):
    """Raised when a status change is not in the transition table.

    Attributes:
        from_status: Current status of the submission.
        to_status: Attempted target status.
        allowed_transitions: Valid target statuses from the current one.
    """

    def __init__(
        self,
        from_status: SubmissionStatus,
        to_status: SubmissionStatus,
        allowed_transitions: list[SubmissionStatus] | None = None,
    ) -> None:
        self.from_status = from_status
        self.to_status = to_status
        self.allowed_transitions = allowed_transitions or []

        allowed_str = (
            f" Valid transitions: {[s.value for s in self.allowed_transitions]}"
            if self.allowed_transitions
            else ""
        )
        super().__init__(
            f"Invalid status transition: {from_status.value} -> {to_status.value}.{allowed_str}"
        )


class SubmissionFinalizedError(BlueCarbonError):
    """Raised when attempting to change the status of a final submission.

    APPROVED and REJECTED are terminal. Only the audit trail may still
    grow afterwards.

    Attributes:
        submission_id: Identifier of the submission.
        final_status: The terminal status it is in.
    """

    def __init__(self, submission_id: str, final_status: SubmissionStatus) -> None:
        self.submission_id = submission_id
        self.final_status = final_status
        super().__init__(
            f"Submission {submission_id} is already final: {final_status.value}. "
            "Final statuses cannot be modified."
        )
