"""Unit tests for the hosted table row codec."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from bluecarbon.domain.models.credit_record import CreditRecord, CreditStatus
from bluecarbon.domain.models.submission import (
    AuditEntry,
    EcosystemType,
    GeoPoint,
    Submission,
    SubmissionStatus,
)
from bluecarbon.infrastructure.adapters.persistence.record_codec import (
    credit_to_row,
    parse_timestamp,
    row_to_credit,
    row_to_submission,
    submission_to_row,
)

CREATED = datetime(2026, 1, 5, 7, 45, tzinfo=timezone.utc)


class TestTimestamps:
    """Tests for ISO 8601 timestamp parsing."""

    def test_trailing_z_parsed_as_utc(self) -> None:
        assert parse_timestamp("2026-01-05T07:45:00Z") == CREATED

    def test_naive_value_assumed_utc(self) -> None:
        assert parse_timestamp("2026-01-05T07:45:00") == CREATED

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty_values_are_none(self, value: str | None) -> None:
        assert parse_timestamp(value) is None

    def test_invalid_value_raises(self) -> None:
        with pytest.raises(ValueError):
            parse_timestamp("yesterday")


class TestSubmissionRows:
    """Tests for submission encoding and decoding."""

    def test_row_uses_camel_case_layout(self) -> None:
        submission = Submission(
            id="sub-1",
            user_id="u-fisherman-1",
            user_name="Wayan",
            type=EcosystemType.MANGROVE,
            location=GeoPoint(lat=-8.4, lng=115.2),
            timestamp=CREATED,
            status=SubmissionStatus.AI_VERIFIED,
            ai_score=0.85,
            detected_features=("Aerial Roots",),
            credits_generated=1.5,
            audit_trail=(AuditEntry(CREATED, "Submission Created", "Wayan", "up"),),
        )

        row = submission_to_row(submission)

        assert row["userId"] == "u-fisherman-1"
        assert row["location"] == {"lat": -8.4, "lng": 115.2}
        assert row["status"] == "AI_VERIFIED"
        assert row["aiScore"] == 0.85
        assert row["detectedFeatures"] == ["Aerial Roots"]
        assert row["creditsGenerated"] == 1.5
        assert row["auditTrail"][0]["action"] == "Submission Created"
        assert row["timestamp"] == CREATED.isoformat()
        assert row_to_submission(row) == submission

    def test_sparse_row_gets_defaults(self) -> None:
        submission = row_to_submission({"id": "sub-x", "type": "SEAGRASS"})

        assert submission.status == SubmissionStatus.PENDING
        assert submission.location == GeoPoint(lat=0.0, lng=0.0)
        assert submission.timestamp is None
        assert submission.audit_trail == ()
        assert submission.credits_generated is None

    def test_out_of_range_score_clamped(self) -> None:
        submission = row_to_submission(
            {"id": "sub-x", "type": "MANGROVE", "aiScore": 3.2}
        )

        assert submission.ai_score == 1.0

    def test_unknown_status_raises(self) -> None:
        with pytest.raises(ValueError):
            row_to_submission({"id": "sub-x", "type": "MANGROVE", "status": "DRAFT"})

    def test_missing_type_raises(self) -> None:
        with pytest.raises(KeyError):
            row_to_submission({"id": "sub-x"})


class TestCreditRows:
    """Tests for credit encoding and decoding."""

    def test_sold_credit_row(self) -> None:
        credit = CreditRecord(
            id="c-1",
            submission_id="sub-1",
            amount=1.5,
            vintage="2026",
            status=CreditStatus.SOLD,
            owner_id="u-corp-1",
            purchase_date=CREATED,
        )

        row = credit_to_row(credit)

        assert row == {
            "id": "c-1",
            "submissionId": "sub-1",
            "amount": 1.5,
            "vintage": "2026",
            "status": "SOLD",
            "ownerId": "u-corp-1",
            "purchaseDate": CREATED.isoformat(),
        }
        assert row_to_credit(row) == credit

    def test_status_defaults_to_available(self) -> None:
        credit = row_to_credit({"id": "c-1", "submissionId": "sub-1", "amount": 2})

        assert credit.status == CreditStatus.AVAILABLE
        assert credit.amount == 2.0
