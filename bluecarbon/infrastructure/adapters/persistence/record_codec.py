"""Wire codec for the hosted `submissions` and `credits` tables.

Rows use the camelCase document layout the tables were created with:

    submissions: id, userId, userName, timestamp, location{lat,lng},
        region, imageUrl, type, status, aiScore, aiReasoning,
        detectedFeatures, environmentalContext, googleMapsUrl,
        creditsGenerated, blockchainHash, auditTrail[{timestamp, action,
        user, note}], verifierComments
    credits: id, submissionId, amount, vintage, status, ownerId,
        purchaseDate

Timestamps are ISO 8601 strings. Decoding raises KeyError or ValueError
on rows that cannot be represented.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from bluecarbon.domain.models.credit_record import CreditRecord, CreditStatus
from bluecarbon.domain.models.submission import (
    AuditEntry,
    EcosystemType,
    GeoPoint,
    Submission,
    SubmissionStatus,
)
from bluecarbon.domain.models.verification import clamp_confidence


def format_timestamp(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat()


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO 8601 string (including a trailing "Z") as UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def submission_to_row(submission: Submission) -> dict[str, Any]:
    return {
        "id": submission.id,
        "userId": submission.user_id,
        "userName": submission.user_name,
        "timestamp": format_timestamp(submission.timestamp),
        "location": {"lat": submission.location.lat, "lng": submission.location.lng},
        "region": submission.region,
        "imageUrl": submission.image_url,
        "type": submission.type.value,
        "status": submission.status.value,
        "aiScore": submission.ai_score,
        "aiReasoning": submission.ai_reasoning,
        "detectedFeatures": list(submission.detected_features),
        "environmentalContext": submission.environmental_context,
        "googleMapsUrl": submission.google_maps_url,
        "creditsGenerated": submission.credits_generated,
        "blockchainHash": submission.blockchain_hash,
        "auditTrail": [
            {
                "timestamp": format_timestamp(entry.timestamp),
                "action": entry.action,
                "user": entry.user,
                "note": entry.note,
            }
            for entry in submission.audit_trail
        ],
        "verifierComments": submission.verifier_comments,
    }


def row_to_submission(row: dict[str, Any]) -> Submission:
    location = row.get("location") or {}
    credits_generated = row.get("creditsGenerated")
    return Submission(
        id=str(row["id"]),
        user_id=str(row.get("userId") or ""),
        user_name=str(row.get("userName") or ""),
        type=EcosystemType(row["type"]),
        location=GeoPoint(
            lat=float(location.get("lat", 0.0)),
            lng=float(location.get("lng", 0.0)),
        ),
        timestamp=parse_timestamp(row.get("timestamp")),
        region=row.get("region") or "",
        image_url=row.get("imageUrl") or "",
        status=SubmissionStatus(row.get("status") or SubmissionStatus.PENDING.value),
        ai_score=clamp_confidence(float(row.get("aiScore") or 0.0)),
        ai_reasoning=row.get("aiReasoning") or "",
        detected_features=tuple(row.get("detectedFeatures") or ()),
        environmental_context=row.get("environmentalContext") or "",
        google_maps_url=row.get("googleMapsUrl"),
        credits_generated=(
            float(credits_generated) if credits_generated is not None else None
        ),
        blockchain_hash=row.get("blockchainHash"),
        audit_trail=tuple(
            AuditEntry(
                timestamp=parse_timestamp(entry.get("timestamp"))
                or datetime.now(timezone.utc),
                action=entry.get("action") or "",
                user=entry.get("user") or "",
                note=entry.get("note") or "",
            )
            for entry in row.get("auditTrail") or ()
        ),
        verifier_comments=row.get("verifierComments"),
    )


def credit_to_row(credit: CreditRecord) -> dict[str, Any]:
    return {
        "id": credit.id,
        "submissionId": credit.submission_id,
        "amount": credit.amount,
        "vintage": credit.vintage,
        "status": credit.status.value,
        "ownerId": credit.owner_id,
        "purchaseDate": format_timestamp(credit.purchase_date),
    }


def row_to_credit(row: dict[str, Any]) -> CreditRecord:
    return CreditRecord(
        id=str(row["id"]),
        submission_id=str(row["submissionId"]),
        amount=float(row["amount"]),
        vintage=str(row.get("vintage") or ""),
        status=CreditStatus(row.get("status") or CreditStatus.AVAILABLE.value),
        owner_id=row.get("ownerId"),
        purchase_date=parse_timestamp(row.get("purchaseDate")),
    )
