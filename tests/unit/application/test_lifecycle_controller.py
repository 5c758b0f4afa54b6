"""Unit tests for SubmissionLifecycleController.

Tests cover:
- Creation with oracle screening (threshold, defaults, degraded oracle)
- Reviewer transitions, audit entries and at-most-once minting
- Corporate purchases
- Admin user updates
- Oracle re-verification and auditor questions
- Rejected commands leave the record store unchanged
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from bluecarbon.application.services.lifecycle_controller import (
    ADMIN_REVIEW_ACTION,
    CREATED_ACTION,
    CREATED_NOTE,
    DEFAULT_REVIEW_NOTE,
    NGO_REVIEW_ACTION,
    REVERIFY_ACTION,
    CommandOutcome,
    SubmissionLifecycleController,
    decode_data_url,
    encode_data_url,
)
from bluecarbon.application.services.record_store import RecordStore
from bluecarbon.domain.models.credit_record import CreditStatus
from bluecarbon.domain.models.outbox import OutboxOperation
from bluecarbon.domain.models.submission import (
    EcosystemType,
    GeoPoint,
    Submission,
    SubmissionStatus,
)
from bluecarbon.domain.models.user import User, UserStatus
from bluecarbon.domain.models.verification import (
    EMPTY_ANSWER,
    FAILED_SUGGESTION,
    ORACLE_OFFLINE_ANSWER,
    VerificationVerdict,
)
from bluecarbon.infrastructure.stubs import VerificationOracleStub
from tests.helpers import SAMPLE_IMAGE


def _snapshot(store: RecordStore) -> tuple:
    return (store.submissions, store.credits, store.users)


async def _create(
    controller: SubmissionLifecycleController,
    actor: User,
    ecosystem: EcosystemType = EcosystemType.MANGROVE,
) -> Submission:
    result = await controller.create_submission(SAMPLE_IMAGE, ecosystem, actor)
    assert result.applied
    return result.record


def _approve(
    controller: SubmissionLifecycleController,
    submission_id: str,
    ngo: User,
    admin: User,
) -> Submission:
    ngo_result = controller.update_submission_status(
        submission_id, SubmissionStatus.NGO_APPROVED, ngo
    )
    assert ngo_result.applied
    result = controller.update_submission_status(
        submission_id, SubmissionStatus.APPROVED, admin
    )
    assert result.applied
    return result.record


class TestCreateSubmission:
    """Tests for create_submission()."""

    @pytest.mark.asyncio
    async def test_mangrove_scenario(
        self,
        controller: SubmissionLifecycleController,
        oracle: VerificationOracleStub,
        fisherman: User,
        clock,
    ) -> None:
        """Confidence 0.85 on a mangrove upload starts AI_VERIFIED."""
        oracle.set_confidence(0.85)

        result = await controller.create_submission(
            SAMPLE_IMAGE, EcosystemType.MANGROVE, fisherman
        )

        submission = result.record
        assert result.outcome == CommandOutcome.APPLIED
        assert submission.status == SubmissionStatus.AI_VERIFIED
        assert submission.credits_generated == 1.5
        assert submission.ai_score == 0.85
        assert submission.user_id == fisherman.id
        assert submission.user_name == fisherman.name
        assert submission.timestamp == clock()
        assert len(submission.audit_trail) == 1
        entry = submission.audit_trail[0]
        assert entry.action == CREATED_ACTION
        assert entry.note == CREATED_NOTE
        assert entry.user == fisherman.name

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("confidence", "expected"),
        [
            (0.7, SubmissionStatus.AI_VERIFIED),
            (0.95, SubmissionStatus.AI_VERIFIED),
            (0.69, SubmissionStatus.PENDING),
            (0.0, SubmissionStatus.PENDING),
        ],
    )
    async def test_initial_status_follows_threshold(
        self,
        controller: SubmissionLifecycleController,
        oracle: VerificationOracleStub,
        fisherman: User,
        confidence: float,
        expected: SubmissionStatus,
    ) -> None:
        oracle.set_confidence(confidence)

        submission = await _create(controller, fisherman)

        assert submission.status == expected

    @pytest.mark.asyncio
    async def test_seagrass_credit_amount(
        self, controller: SubmissionLifecycleController, fisherman: User
    ) -> None:
        submission = await _create(controller, fisherman, EcosystemType.SEAGRASS)

        assert submission.credits_generated == 0.8

    @pytest.mark.asyncio
    async def test_evidence_stored_hashed_and_queued(
        self,
        controller: SubmissionLifecycleController,
        store: RecordStore,
        outbox,
        fisherman: User,
    ) -> None:
        submission = await _create(controller, fisherman)

        assert decode_data_url(submission.image_url) == SAMPLE_IMAGE
        assert submission.blockchain_hash is not None
        assert len(submission.blockchain_hash) == 64
        assert submission.id.startswith("sub-")
        assert store.submissions[0] == submission
        entries = outbox.entries()
        assert [e.operation for e in entries] == [OutboxOperation.INSERT_SUBMISSION]
        assert entries[0].record_id == submission.id

    @pytest.mark.asyncio
    async def test_mock_location_near_default_when_missing(
        self,
        controller: SubmissionLifecycleController,
        oracle: VerificationOracleStub,
        fisherman: User,
    ) -> None:
        submission = await _create(controller, fisherman)

        assert abs(submission.location.lat - -8.4095) <= 0.025
        assert abs(submission.location.lng - 115.1889) <= 0.025
        assert oracle.verify_calls[0].lat == submission.location.lat
        assert submission.region in ("North Coast Basin", "Eastern Mangrove Delta")

    @pytest.mark.asyncio
    async def test_given_coordinates_and_region_used(
        self,
        controller: SubmissionLifecycleController,
        fisherman: User,
    ) -> None:
        result = await controller.create_submission(
            SAMPLE_IMAGE,
            EcosystemType.SEAGRASS,
            fisherman,
            coordinates=GeoPoint(lat=-3.5, lng=120.1),
            region="Sulawesi Shelf",
        )

        assert result.record.location == GeoPoint(lat=-3.5, lng=120.1)
        assert result.record.region == "Sulawesi Shelf"

    @pytest.mark.asyncio
    async def test_offline_oracle_degrades_to_pending(
        self,
        controller: SubmissionLifecycleController,
        oracle: VerificationOracleStub,
        fisherman: User,
    ) -> None:
        oracle.set_offline()

        result = await controller.create_submission(
            SAMPLE_IMAGE, EcosystemType.MANGROVE, fisherman
        )

        assert result.applied
        assert result.record.status == SubmissionStatus.PENDING
        assert result.record.ai_score == 0.0
        assert result.record.environmental_context == "Unknown"
        assert result.detail == FAILED_SUGGESTION

    @pytest.mark.asyncio
    async def test_raising_oracle_degrades_to_pending(
        self,
        store: RecordStore,
        outbox,
        fisherman: User,
    ) -> None:
        oracle = AsyncMock()
        oracle.verify_image.side_effect = RuntimeError("socket closed")
        hash_service = MagicMock()
        hash_service.hash_hex.return_value = "ab" * 32
        controller = SubmissionLifecycleController(
            store=store,
            oracle=oracle,
            outbox=outbox,
            hash_service=hash_service,
        )

        result = await controller.create_submission(
            SAMPLE_IMAGE, EcosystemType.MANGROVE, fisherman
        )

        assert result.applied
        assert result.record.status == SubmissionStatus.PENDING
        assert result.record.ai_reasoning == VerificationVerdict.failed().reasoning

    @pytest.mark.asyncio
    async def test_non_fisherman_cannot_upload(
        self,
        controller: SubmissionLifecycleController,
        oracle: VerificationOracleStub,
        store: RecordStore,
        ngo: User,
    ) -> None:
        result = await controller.create_submission(
            SAMPLE_IMAGE, EcosystemType.MANGROVE, ngo
        )

        assert result.outcome == CommandOutcome.FORBIDDEN
        assert store.submissions == ()
        assert oracle.verify_calls == []


class TestUpdateSubmissionStatus:
    """Tests for update_submission_status()."""

    @pytest.mark.asyncio
    async def test_approval_mints_credit(
        self,
        controller: SubmissionLifecycleController,
        oracle: VerificationOracleStub,
        store: RecordStore,
        fisherman: User,
        ngo: User,
        admin: User,
    ) -> None:
        """Approval mints one AVAILABLE credit for the submission's amount."""
        oracle.set_confidence(0.85)
        submission = await _create(controller, fisherman)

        approved = _approve(controller, submission.id, ngo, admin)

        assert approved.status == SubmissionStatus.APPROVED
        assert len(store.credits) == 1
        credit = store.credits[0]
        assert credit.submission_id == submission.id
        assert credit.amount == 1.5
        assert credit.status == CreditStatus.AVAILABLE
        assert credit.vintage == str(submission.timestamp.year)
        assert credit.id.startswith("c-")

    @pytest.mark.asyncio
    async def test_approved_submission_has_exactly_one_credit(
        self,
        controller: SubmissionLifecycleController,
        store: RecordStore,
        fisherman: User,
        ngo: User,
        admin: User,
    ) -> None:
        submission = await _create(controller, fisherman)
        _approve(controller, submission.id, ngo, admin)

        again = controller.update_submission_status(
            submission.id, SubmissionStatus.APPROVED, admin
        )

        assert again.outcome == CommandOutcome.INVALID_TRANSITION
        for s in store.submissions:
            if s.status == SubmissionStatus.APPROVED:
                minted = [c for c in store.credits if c.submission_id == s.id]
                assert len(minted) == 1

    @pytest.mark.asyncio
    async def test_credit_insert_enqueued_before_submission_update(
        self,
        controller: SubmissionLifecycleController,
        outbox,
        fisherman: User,
        ngo: User,
        admin: User,
    ) -> None:
        submission = await _create(controller, fisherman)
        _approve(controller, submission.id, ngo, admin)

        assert [e.operation for e in outbox.entries()] == [
            OutboxOperation.INSERT_SUBMISSION,
            OutboxOperation.UPDATE_SUBMISSION,
            OutboxOperation.INSERT_CREDIT,
            OutboxOperation.UPDATE_SUBMISSION,
        ]

    @pytest.mark.asyncio
    async def test_audit_entries_labelled_by_role(
        self,
        controller: SubmissionLifecycleController,
        fisherman: User,
        ngo: User,
        admin: User,
    ) -> None:
        submission = await _create(controller, fisherman)
        controller.update_submission_status(
            submission.id, SubmissionStatus.NGO_APPROVED, ngo, "Biomass confirmed"
        )

        result = controller.update_submission_status(
            submission.id, SubmissionStatus.APPROVED, admin
        )

        trail = result.record.audit_trail
        assert [e.action for e in trail] == [
            CREATED_ACTION,
            f"{NGO_REVIEW_ACTION}: NGO_APPROVED",
            f"{ADMIN_REVIEW_ACTION}: APPROVED",
        ]
        assert trail[1].note == "Biomass confirmed"
        assert trail[1].user == ngo.name
        assert trail[2].note == DEFAULT_REVIEW_NOTE
        assert result.record.verifier_comments == "Biomass confirmed"

    @pytest.mark.asyncio
    async def test_unknown_submission_leaves_store_unchanged(
        self,
        controller: SubmissionLifecycleController,
        store: RecordStore,
        outbox,
        fisherman: User,
        admin: User,
    ) -> None:
        await _create(controller, fisherman)
        before = _snapshot(store)
        queued = len(outbox.entries())

        result = controller.update_submission_status(
            "sub-missing", SubmissionStatus.APPROVED, admin
        )

        assert result.outcome == CommandOutcome.NOT_FOUND
        assert _snapshot(store) == before
        assert len(outbox.entries()) == queued

    @pytest.mark.asyncio
    async def test_ngo_cannot_give_final_approval(
        self,
        controller: SubmissionLifecycleController,
        store: RecordStore,
        fisherman: User,
        ngo: User,
    ) -> None:
        submission = await _create(controller, fisherman)
        controller.update_submission_status(
            submission.id, SubmissionStatus.NGO_APPROVED, ngo
        )
        before = _snapshot(store)

        result = controller.update_submission_status(
            submission.id, SubmissionStatus.APPROVED, ngo
        )

        assert result.outcome == CommandOutcome.FORBIDDEN
        assert _snapshot(store) == before

    @pytest.mark.asyncio
    async def test_transition_outside_table_rejected(
        self,
        controller: SubmissionLifecycleController,
        fisherman: User,
        admin: User,
    ) -> None:
        submission = await _create(controller, fisherman)

        result = controller.update_submission_status(
            submission.id, SubmissionStatus.APPROVED, admin
        )

        assert result.outcome == CommandOutcome.INVALID_TRANSITION
        assert result.record.status == submission.status

    @pytest.mark.asyncio
    async def test_oracle_status_cannot_be_set_by_reviewer(
        self,
        controller: SubmissionLifecycleController,
        oracle: VerificationOracleStub,
        fisherman: User,
        ngo: User,
    ) -> None:
        oracle.set_confidence(0.1)
        submission = await _create(controller, fisherman)

        result = controller.update_submission_status(
            submission.id, SubmissionStatus.AI_VERIFIED, ngo
        )

        assert result.outcome == CommandOutcome.INVALID_TRANSITION

    @pytest.mark.asyncio
    async def test_final_review_rejection(
        self,
        controller: SubmissionLifecycleController,
        store: RecordStore,
        fisherman: User,
        ngo: User,
        admin: User,
    ) -> None:
        submission = await _create(controller, fisherman)
        controller.update_submission_status(
            submission.id, SubmissionStatus.NGO_APPROVED, ngo
        )

        result = controller.update_submission_status(
            submission.id, SubmissionStatus.REJECTED, admin, "Image reused"
        )

        assert result.applied
        assert result.record.status == SubmissionStatus.REJECTED
        assert store.credits == ()


class TestPurchaseCredit:
    """Tests for purchase_credit()."""

    @pytest.mark.asyncio
    async def test_corporate_purchase(
        self,
        controller: SubmissionLifecycleController,
        store: RecordStore,
        outbox,
        fisherman: User,
        ngo: User,
        admin: User,
        corporate: User,
        clock,
    ) -> None:
        submission = await _create(controller, fisherman)
        _approve(controller, submission.id, ngo, admin)
        credit = store.credits[0]

        result = controller.purchase_credit(credit.id, corporate)

        assert result.applied
        sold = store.get_credit(credit.id)
        assert sold.status == CreditStatus.SOLD
        assert sold.owner_id == corporate.id
        assert sold.purchase_date == clock()
        buyer = store.get_user(corporate.id)
        assert buyer.credits_purchased == corporate.credits_purchased + 1.5
        assert outbox.entries()[-1].operation == OutboxOperation.UPDATE_CREDIT

    @pytest.mark.asyncio
    async def test_non_corporate_purchase_leaves_state_unchanged(
        self,
        controller: SubmissionLifecycleController,
        store: RecordStore,
        fisherman: User,
        ngo: User,
        admin: User,
    ) -> None:
        submission = await _create(controller, fisherman)
        _approve(controller, submission.id, ngo, admin)
        before = _snapshot(store)

        result = controller.purchase_credit(store.credits[0].id, admin)

        assert result.outcome == CommandOutcome.FORBIDDEN
        assert _snapshot(store) == before

    @pytest.mark.asyncio
    async def test_sold_credit_conflicts(
        self,
        controller: SubmissionLifecycleController,
        store: RecordStore,
        fisherman: User,
        ngo: User,
        admin: User,
        corporate: User,
    ) -> None:
        submission = await _create(controller, fisherman)
        _approve(controller, submission.id, ngo, admin)
        credit_id = store.credits[0].id
        controller.purchase_credit(credit_id, corporate)
        before = _snapshot(store)

        result = controller.purchase_credit(credit_id, corporate)

        assert result.outcome == CommandOutcome.CONFLICT
        assert _snapshot(store) == before

    def test_unknown_credit_not_found(
        self, controller: SubmissionLifecycleController, corporate: User
    ) -> None:
        result = controller.purchase_credit("c-missing", corporate)

        assert result.outcome == CommandOutcome.NOT_FOUND


class TestUpdateUser:
    """Tests for update_user()."""

    def test_admin_updates_fields(
        self,
        controller: SubmissionLifecycleController,
        store: RecordStore,
        fisherman: User,
        admin: User,
    ) -> None:
        result = controller.update_user(
            fisherman.id, admin, status=UserStatus.VERIFIED, trust_score=80
        )

        assert result.applied
        updated = store.get_user(fisherman.id)
        assert updated.status == UserStatus.VERIFIED
        assert updated.trust_score == 80
        assert updated.earnings == fisherman.earnings

    @pytest.mark.parametrize(("given", "stored"), [(250, 100), (-5, 0)])
    def test_trust_score_clamped(
        self,
        controller: SubmissionLifecycleController,
        store: RecordStore,
        fisherman: User,
        admin: User,
        given: int,
        stored: int,
    ) -> None:
        controller.update_user(fisherman.id, admin, trust_score=given)

        assert store.get_user(fisherman.id).trust_score == stored

    def test_non_admin_rejected(
        self,
        controller: SubmissionLifecycleController,
        store: RecordStore,
        fisherman: User,
        ngo: User,
    ) -> None:
        result = controller.update_user(fisherman.id, ngo, trust_score=99)

        assert result.outcome == CommandOutcome.FORBIDDEN
        assert store.get_user(fisherman.id) == fisherman

    def test_unknown_user_not_found(
        self, controller: SubmissionLifecycleController, admin: User
    ) -> None:
        result = controller.update_user("u-missing", admin, trust_score=10)

        assert result.outcome == CommandOutcome.NOT_FOUND


class TestReverifySubmission:
    """Tests for reverify_submission()."""

    @pytest.mark.asyncio
    async def test_pending_submission_reverified(
        self,
        controller: SubmissionLifecycleController,
        oracle: VerificationOracleStub,
        outbox,
        fisherman: User,
        ngo: User,
    ) -> None:
        oracle.set_confidence(0.3)
        submission = await _create(controller, fisherman)
        oracle.set_confidence(0.9)

        result = await controller.reverify_submission(submission.id, ngo)

        assert result.applied
        assert result.record.status == SubmissionStatus.AI_VERIFIED
        assert result.record.ai_score == 0.9
        assert result.record.audit_trail[-1].action == REVERIFY_ACTION
        assert outbox.entries()[-1].operation == OutboxOperation.UPDATE_SUBMISSION

    @pytest.mark.asyncio
    async def test_low_confidence_marks_ai_failed(
        self,
        controller: SubmissionLifecycleController,
        oracle: VerificationOracleStub,
        fisherman: User,
        ngo: User,
    ) -> None:
        oracle.set_confidence(0.3)
        submission = await _create(controller, fisherman)

        result = await controller.reverify_submission(submission.id, ngo)

        assert result.record.status == SubmissionStatus.AI_FAILED

    @pytest.mark.asyncio
    async def test_non_pending_submission_conflicts(
        self,
        controller: SubmissionLifecycleController,
        oracle: VerificationOracleStub,
        fisherman: User,
        ngo: User,
    ) -> None:
        oracle.set_confidence(0.9)
        submission = await _create(controller, fisherman)

        result = await controller.reverify_submission(submission.id, ngo)

        assert result.outcome == CommandOutcome.CONFLICT
        assert len(oracle.verify_calls) == 1

    @pytest.mark.asyncio
    async def test_fisherman_cannot_reverify(
        self,
        controller: SubmissionLifecycleController,
        oracle: VerificationOracleStub,
        fisherman: User,
    ) -> None:
        oracle.set_confidence(0.3)
        submission = await _create(controller, fisherman)

        result = await controller.reverify_submission(submission.id, fisherman)

        assert result.outcome == CommandOutcome.FORBIDDEN


class TestAskAuditorQuestion:
    """Tests for ask_auditor_question()."""

    @pytest.mark.asyncio
    async def test_answer_returned(
        self,
        controller: SubmissionLifecycleController,
        oracle: VerificationOracleStub,
        fisherman: User,
        corporate: User,
    ) -> None:
        submission = await _create(controller, fisherman)

        result = await controller.ask_auditor_question(
            submission.id, "Are propagules visible?", corporate
        )

        assert result.applied
        assert result.detail == oracle.answer
        assert oracle.questions == ["Are propagules visible?"]

    @pytest.mark.asyncio
    async def test_blank_answer_replaced(
        self,
        controller: SubmissionLifecycleController,
        oracle: VerificationOracleStub,
        fisherman: User,
    ) -> None:
        oracle.answer = "   "
        submission = await _create(controller, fisherman)

        result = await controller.ask_auditor_question(submission.id, "Why?", fisherman)

        assert result.detail == EMPTY_ANSWER

    @pytest.mark.asyncio
    async def test_oracle_error_gives_offline_answer(
        self,
        controller: SubmissionLifecycleController,
        oracle: VerificationOracleStub,
        fisherman: User,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        submission = await _create(controller, fisherman)
        monkeypatch.setattr(
            oracle, "ask_question", AsyncMock(side_effect=TimeoutError("slow"))
        )

        result = await controller.ask_auditor_question(submission.id, "Why?", fisherman)

        assert result.applied
        assert result.detail == ORACLE_OFFLINE_ANSWER

    @pytest.mark.asyncio
    async def test_unknown_submission_not_found(
        self, controller: SubmissionLifecycleController, fisherman: User
    ) -> None:
        result = await controller.ask_auditor_question("sub-x", "Why?", fisherman)

        assert result.outcome == CommandOutcome.NOT_FOUND


class TestDataUrl:
    """Tests for evidence data URL helpers."""

    def test_encode_then_decode(self) -> None:
        url = encode_data_url(SAMPLE_IMAGE, "image/png")

        assert url.startswith("data:image/png;base64,")
        assert decode_data_url(url) == SAMPLE_IMAGE

    @pytest.mark.parametrize(
        "value", ["https://example.org/a.jpg", "data:image/png,raw", "data:x;base64,@@"]
    )
    def test_non_inline_values_rejected(self, value: str) -> None:
        assert decode_data_url(value) is None
