"""Submission lifecycle controller.

Owns every registry mutation: submission creation (with oracle
screening), status transitions, credit minting, purchases, admin user
updates, oracle re-verification and auditor questions.

Every command returns a CommandResult and never raises to the caller.
Domain errors are logged and converted to a non-applied outcome.

Command sequence:
    1. Authorize the actor through the AuthorizationPolicy.
    2. Validate against the record store and the transition table.
    3. Commit to the record store (no await between read and write).
    4. Enqueue remote writes on the persistence outbox.
"""

from __future__ import annotations

import base64
import binascii
import random
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

from bluecarbon.application.ports.content_hash_service import (
    ContentHashServiceProtocol,
)
from bluecarbon.application.ports.registry_metrics import RegistryMetricsProtocol
from bluecarbon.application.ports.verification_oracle import (
    VerificationOracleProtocol,
)
from bluecarbon.application.services.base import LoggingMixin
from bluecarbon.application.services.persistence_outbox import PersistenceOutbox
from bluecarbon.application.services.record_store import RecordStore
from bluecarbon.config.lifecycle_config import DEFAULT_LIFECYCLE_CONFIG, LifecycleConfig
from bluecarbon.domain.errors.authorization import UnauthorizedActionError
from bluecarbon.domain.errors.registry import (
    CreditAlreadyMintedError,
    CreditAlreadySoldError,
    RecordNotFoundError,
    SubmissionNotEligibleError,
)
from bluecarbon.domain.errors.state_transition import (
    InvalidStatusTransitionError,
    SubmissionFinalizedError,
)
from bluecarbon.domain.exceptions import BlueCarbonError
from bluecarbon.domain.models.credit_record import CreditRecord
from bluecarbon.domain.models.outbox import OutboxOperation
from bluecarbon.domain.models.submission import (
    CREDITS_PER_ECOSYSTEM,
    AuditEntry,
    EcosystemType,
    GeoPoint,
    Submission,
    SubmissionStatus,
)
from bluecarbon.domain.models.user import (
    MAX_TRUST_SCORE,
    MIN_TRUST_SCORE,
    User,
    UserRole,
    UserStatus,
)
from bluecarbon.domain.models.verification import (
    EMPTY_ANSWER,
    ORACLE_OFFLINE_ANSWER,
    VerificationVerdict,
)
from bluecarbon.domain.services.authorization_policy import (
    Action,
    AuthorizationPolicy,
)

CREATED_ACTION = "Submission Created"
CREATED_NOTE = "Field data uploaded via mobile terminal."
NGO_REVIEW_ACTION = "NGO Scientific Review"
ADMIN_REVIEW_ACTION = "Admin Final Review"
DEFAULT_REVIEW_NOTE = "Verification completed after scientific review."
REVERIFY_ACTION = "AI Re-Verification"

DEFAULT_IMAGE_MIME = "image/jpeg"


class CommandOutcome(Enum):
    """Result classification of a lifecycle command."""

    APPLIED = "APPLIED"
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    CONFLICT = "CONFLICT"


_OUTCOME_BY_ERROR: tuple[tuple[type[BlueCarbonError], CommandOutcome], ...] = (
    (RecordNotFoundError, CommandOutcome.NOT_FOUND),
    (UnauthorizedActionError, CommandOutcome.FORBIDDEN),
    (InvalidStatusTransitionError, CommandOutcome.INVALID_TRANSITION),
    (SubmissionFinalizedError, CommandOutcome.INVALID_TRANSITION),
    (CreditAlreadySoldError, CommandOutcome.CONFLICT),
    (CreditAlreadyMintedError, CommandOutcome.CONFLICT),
    (SubmissionNotEligibleError, CommandOutcome.CONFLICT),
)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a lifecycle command.

    Attributes:
        outcome: Classification of the result.
        record: The affected record after the command (or as it stood
            when the command was rejected), if one was resolved.
        detail: Human-readable detail: the rejection reason, the
            oracle suggestion on creation, or the oracle answer.
    """

    outcome: CommandOutcome
    record: Any = None
    detail: str | None = None

    @property
    def applied(self) -> bool:
        return self.outcome == CommandOutcome.APPLIED


def encode_data_url(image: bytes, mime_type: str = DEFAULT_IMAGE_MIME) -> str:
    """Encode image bytes as a base64 data URL."""
    encoded = base64.b64encode(image).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def decode_data_url(data_url: str) -> bytes | None:
    """Decode a base64 data URL; None if it is not one."""
    header, sep, body = data_url.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        return None
    try:
        return base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError):
        return None


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SubmissionLifecycleController(LoggingMixin):
    """Applies registry commands to the record store."""

    def __init__(
        self,
        store: RecordStore,
        oracle: VerificationOracleProtocol,
        outbox: PersistenceOutbox,
        hash_service: ContentHashServiceProtocol,
        policy: AuthorizationPolicy | None = None,
        config: LifecycleConfig = DEFAULT_LIFECYCLE_CONFIG,
        metrics: RegistryMetricsProtocol | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Initialize the controller.

        Args:
            store: Authoritative record store.
            oracle: Image verification oracle.
            outbox: Queue for remote writes.
            hash_service: Evidence content hashing.
            policy: Role policy (defaults to the standard table).
            config: Lifecycle tunables.
            metrics: Optional metrics sink.
            rng: Random source for region labels and mock locations.
            clock: Time source, injectable for tests.
        """
        self._store = store
        self._oracle = oracle
        self._outbox = outbox
        self._hash_service = hash_service
        self._policy = policy or AuthorizationPolicy()
        self._config = config
        self._metrics = metrics
        self._rng = rng or random.Random()
        self._clock = clock
        self._init_logger(component="lifecycle")

    @property
    def store(self) -> RecordStore:
        return self._store

    # Commands

    async def create_submission(
        self,
        image: bytes,
        ecosystem_type: EcosystemType,
        actor: User,
        coordinates: GeoPoint | None = None,
        region: str | None = None,
        mime_type: str = DEFAULT_IMAGE_MIME,
    ) -> CommandResult:
        """Create a submission from uploaded field evidence.

        The oracle is consulted before anything is committed. An oracle
        failure degrades to a zero-confidence verdict, so creation always
        completes for an authorized actor.
        """
        log = self._log_operation(
            "create_submission",
            actor_id=actor.id,
            ecosystem_type=ecosystem_type.value,
        )
        try:
            self._policy.require(actor, Action.CREATE_SUBMISSION)
        except BlueCarbonError as exc:
            return self._rejected(log, exc)

        location = coordinates or self._mock_location()
        verdict = await self._verify(image, ecosystem_type, location)
        status = (
            SubmissionStatus.AI_VERIFIED
            if verdict.passes(self._config.confidence_threshold)
            else SubmissionStatus.PENDING
        )

        now = self._clock()
        submission = Submission(
            id=f"sub-{uuid4().hex}",
            user_id=actor.id,
            user_name=actor.name,
            type=ecosystem_type,
            location=location,
            timestamp=now,
            region=region or self._rng.choice(self._config.regions),
            image_url=encode_data_url(image, mime_type),
            status=status,
            ai_score=verdict.confidence,
            ai_reasoning=verdict.reasoning,
            detected_features=verdict.detected_features,
            environmental_context=verdict.environmental_context,
            google_maps_url=verdict.map_reference,
            credits_generated=CREDITS_PER_ECOSYSTEM[ecosystem_type],
            blockchain_hash=self._hash_service.hash_hex(image),
            audit_trail=(
                AuditEntry(
                    timestamp=now,
                    action=CREATED_ACTION,
                    user=actor.name,
                    note=CREATED_NOTE,
                ),
            ),
        )

        self._store.add_submission(submission)
        self._outbox.enqueue(OutboxOperation.INSERT_SUBMISSION, submission)
        if self._metrics is not None:
            self._metrics.record_submission_created(status.value)

        log.info(
            "submission_created",
            submission_id=submission.id,
            status=status.value,
            ai_score=verdict.confidence,
            degraded=verdict.degraded,
        )
        return CommandResult(
            CommandOutcome.APPLIED, submission, detail=verdict.suggestion
        )

    def update_submission_status(
        self,
        submission_id: str,
        status: SubmissionStatus,
        actor: User,
        verifier_comments: str | None = None,
    ) -> CommandResult:
        """Apply a reviewer verdict to a submission.

        Entering APPROVED mints exactly one credit for the submission.
        The credit insert is enqueued before the submission update.
        """
        log = self._log_operation(
            "update_submission_status",
            submission_id=submission_id,
            target_status=status.value,
            actor_id=actor.id,
        )
        submission = self._store.get_submission(submission_id)
        if submission is None:
            log.warning("submission_not_found")
            return CommandResult(
                CommandOutcome.NOT_FOUND,
                detail=str(RecordNotFoundError("submission", submission_id)),
            )

        try:
            action = self._policy.action_for_status(submission.status, status)
            if action is None:
                raise InvalidStatusTransitionError(
                    from_status=submission.status,
                    to_status=status,
                    allowed_transitions=self._reviewable(submission.status),
                )
            self._policy.require(actor, action)
            updated = submission.with_status(status, verifier_comments)
        except BlueCarbonError as exc:
            return self._rejected(log, exc, submission)

        label = (
            ADMIN_REVIEW_ACTION if actor.role == UserRole.ADMIN else NGO_REVIEW_ACTION
        )
        now = self._clock()
        updated = updated.with_audit_entry(
            AuditEntry(
                timestamp=now,
                action=f"{label}: {status.value}",
                user=actor.name,
                note=verifier_comments or DEFAULT_REVIEW_NOTE,
            )
        )

        credit: CreditRecord | None = None
        if (
            status == SubmissionStatus.APPROVED
            and self._store.credit_for_submission(updated.id) is None
        ):
            credit = CreditRecord(
                id=f"c-{uuid4().hex}",
                submission_id=updated.id,
                amount=updated.credit_amount(self._config.default_credit_amount),
                vintage=updated.vintage(),
            )

        self._store.replace_submission(updated)
        if credit is not None:
            self._store.add_credit(credit)
            self._outbox.enqueue(OutboxOperation.INSERT_CREDIT, credit)
        self._outbox.enqueue(OutboxOperation.UPDATE_SUBMISSION, updated)

        if self._metrics is not None:
            self._metrics.record_status_transition(status.value)
            if credit is not None:
                self._metrics.record_credit_minted(credit.amount)

        log.info(
            "submission_status_updated",
            from_status=submission.status.value,
            credit_id=credit.id if credit else None,
        )
        return CommandResult(
            CommandOutcome.APPLIED,
            updated,
            detail=f"Minted credit {credit.id}" if credit else None,
        )

    def purchase_credit(self, credit_id: str, actor: User) -> CommandResult:
        """Sell an AVAILABLE credit to a corporate buyer."""
        log = self._log_operation(
            "purchase_credit", credit_id=credit_id, actor_id=actor.id
        )
        try:
            self._policy.require(actor, Action.PURCHASE_CREDIT)
            credit = self._require_credit(credit_id)
            buyer = self._require_user(actor.id)
            sold = credit.sold_to(buyer.id, self._clock())
        except BlueCarbonError as exc:
            return self._rejected(log, exc, self._store.get_credit(credit_id))

        buyer = replace(
            buyer, credits_purchased=buyer.credits_purchased + sold.amount
        )
        self._store.replace_credit(sold)
        self._store.replace_user(buyer)
        self._outbox.enqueue(OutboxOperation.UPDATE_CREDIT, sold)
        if self._metrics is not None:
            self._metrics.record_credit_sold(sold.amount)

        log.info(
            "credit_purchased",
            amount=sold.amount,
            credits_purchased=buyer.credits_purchased,
        )
        return CommandResult(CommandOutcome.APPLIED, sold)

    def update_user(
        self,
        user_id: str,
        actor: User,
        status: UserStatus | None = None,
        trust_score: int | None = None,
        earnings: float | None = None,
    ) -> CommandResult:
        """Merge admin changes into a user. Trust scores are clamped."""
        log = self._log_operation("update_user", user_id=user_id, actor_id=actor.id)
        try:
            self._policy.require(actor, Action.MANAGE_USERS)
            user = self._require_user(user_id)
        except BlueCarbonError as exc:
            return self._rejected(log, exc, self._store.get_user(user_id))

        changes: dict[str, Any] = {}
        if status is not None:
            changes["status"] = status
        if trust_score is not None:
            changes["trust_score"] = min(
                MAX_TRUST_SCORE, max(MIN_TRUST_SCORE, trust_score)
            )
        if earnings is not None:
            changes["earnings"] = earnings
        updated = replace(user, **changes)
        self._store.replace_user(updated)

        log.info("user_updated", fields=sorted(changes))
        return CommandResult(CommandOutcome.APPLIED, updated)

    async def ask_auditor_question(
        self, submission_id: str, question: str, actor: User
    ) -> CommandResult:
        """Ask the oracle a free-text question about a submission's evidence."""
        log = self._log_operation(
            "ask_auditor_question", submission_id=submission_id, actor_id=actor.id
        )
        try:
            self._policy.require(actor, Action.ASK_ORACLE)
            submission = self._require_submission(submission_id)
            image = self._evidence_image(submission)
        except BlueCarbonError as exc:
            return self._rejected(log, exc, self._store.get_submission(submission_id))

        outcome = "ok"
        try:
            answer = await self._oracle.ask_question(image, question)
        except Exception as e:
            log.error("oracle_question_failed", error=str(e))
            answer, outcome = ORACLE_OFFLINE_ANSWER, "degraded"
        answer = answer.strip() or EMPTY_ANSWER
        if self._metrics is not None:
            self._metrics.record_oracle_call("ask", outcome)

        log.info("auditor_question_answered", answer_length=len(answer))
        return CommandResult(CommandOutcome.APPLIED, submission, detail=answer)

    async def reverify_submission(
        self, submission_id: str, actor: User
    ) -> CommandResult:
        """Re-run oracle screening on a PENDING submission.

        Moves the submission to AI_VERIFIED or AI_FAILED and refreshes its
        oracle fields.
        """
        log = self._log_operation(
            "reverify_submission", submission_id=submission_id, actor_id=actor.id
        )
        try:
            self._policy.require(actor, Action.REVERIFY_SUBMISSION)
            submission = self._require_pending(submission_id)
            image = self._evidence_image(submission)
        except BlueCarbonError as exc:
            return self._rejected(log, exc, self._store.get_submission(submission_id))

        verdict = await self._verify(image, submission.type, submission.location)
        target = (
            SubmissionStatus.AI_VERIFIED
            if verdict.passes(self._config.confidence_threshold)
            else SubmissionStatus.AI_FAILED
        )

        # The oracle call suspends; re-read before committing.
        try:
            current = self._require_pending(submission_id)
            updated = current.with_status(target)
        except BlueCarbonError as exc:
            return self._rejected(log, exc, self._store.get_submission(submission_id))

        updated = replace(
            updated,
            ai_score=verdict.confidence,
            ai_reasoning=verdict.reasoning,
            detected_features=verdict.detected_features,
            environmental_context=verdict.environmental_context,
            google_maps_url=verdict.map_reference or updated.google_maps_url,
        ).with_audit_entry(
            AuditEntry(
                timestamp=self._clock(),
                action=REVERIFY_ACTION,
                user=actor.name,
                note=verdict.suggestion,
            )
        )
        self._store.replace_submission(updated)
        self._outbox.enqueue(OutboxOperation.UPDATE_SUBMISSION, updated)
        if self._metrics is not None:
            self._metrics.record_status_transition(target.value)

        log.info(
            "submission_reverified",
            status=target.value,
            ai_score=verdict.confidence,
        )
        return CommandResult(CommandOutcome.APPLIED, updated, detail=verdict.suggestion)

    # Helpers

    async def _verify(
        self,
        image: bytes,
        ecosystem_type: EcosystemType,
        location: GeoPoint,
    ) -> VerificationVerdict:
        try:
            verdict = await self._oracle.verify_image(
                image, ecosystem_type, location.lat, location.lng
            )
        except Exception as e:
            self._log.error("oracle_verification_failed", error=str(e))
            verdict = VerificationVerdict.failed()
        if self._metrics is not None:
            self._metrics.record_oracle_call(
                "verify", "degraded" if verdict.degraded else "ok"
            )
        return verdict

    def _mock_location(self) -> GeoPoint:
        lat, lng = self._config.default_location
        jitter = self._config.location_jitter
        return GeoPoint(
            lat=lat + self._rng.uniform(-jitter, jitter),
            lng=lng + self._rng.uniform(-jitter, jitter),
        )

    def _require_submission(self, submission_id: str) -> Submission:
        submission = self._store.get_submission(submission_id)
        if submission is None:
            raise RecordNotFoundError("submission", submission_id)
        return submission

    def _require_pending(self, submission_id: str) -> Submission:
        submission = self._require_submission(submission_id)
        if submission.status != SubmissionStatus.PENDING:
            raise SubmissionNotEligibleError(
                submission_id,
                f"re-verification requires PENDING, status is {submission.status.value}",
            )
        return submission

    def _require_credit(self, credit_id: str) -> CreditRecord:
        credit = self._store.get_credit(credit_id)
        if credit is None:
            raise RecordNotFoundError("credit", credit_id)
        return credit

    def _require_user(self, user_id: str) -> User:
        user = self._store.get_user(user_id)
        if user is None:
            raise RecordNotFoundError("user", user_id)
        return user

    @staticmethod
    def _evidence_image(submission: Submission) -> bytes:
        image = decode_data_url(submission.image_url)
        if image is None:
            raise SubmissionNotEligibleError(
                submission.id, "evidence image is not stored inline"
            )
        return image

    def _reviewable(self, current: SubmissionStatus) -> list[SubmissionStatus]:
        return sorted(
            (
                target
                for target in current.valid_transitions()
                if self._policy.action_for_status(current, target) is not None
            ),
            key=lambda s: s.value,
        )

    @staticmethod
    def _rejected(
        log: Any, exc: BlueCarbonError, record: Any = None
    ) -> CommandResult:
        outcome = CommandOutcome.CONFLICT
        for error_type, mapped in _OUTCOME_BY_ERROR:
            if isinstance(exc, error_type):
                outcome = mapped
                break
        fields = exc.context()
        fields.update(
            outcome=outcome.value,
            error_type=type(exc).__name__,
            reason=str(exc),
        )
        log.warning("command_rejected", **fields)
        return CommandResult(outcome, record, detail=str(exc))
