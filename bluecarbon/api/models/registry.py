"""Registry API request/response models.

Pydantic models for submissions, credits and users. Domain enums are
mirrored as API enums so the OpenAPI schema lists their values.
"""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from bluecarbon.api.models.common import CamelModel, DateTimeWithZ
from bluecarbon.domain.models.credit_record import CreditRecord
from bluecarbon.domain.models.submission import Submission
from bluecarbon.domain.models.user import User


class EcosystemTypeEnum(str, Enum):
    MANGROVE = "MANGROVE"
    SEAGRASS = "SEAGRASS"


class SubmissionStatusEnum(str, Enum):
    PENDING = "PENDING"
    AI_VERIFIED = "AI_VERIFIED"
    AI_FAILED = "AI_FAILED"
    FIELD_CHECK = "FIELD_CHECK"
    IN_REVIEW = "IN_REVIEW"
    NGO_APPROVED = "NGO_APPROVED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class UserStatusEnum(str, Enum):
    PENDING_KYC = "PENDING_KYC"
    ACTIVE = "ACTIVE"
    VERIFIED = "VERIFIED"
    SUSPENDED = "SUSPENDED"


class LocationModel(CamelModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)


class AuditEntryModel(CamelModel):
    timestamp: DateTimeWithZ
    action: str
    user: str
    note: str


class SubmissionResponse(CamelModel):
    """A submission as served to clients."""

    id: str
    user_id: str
    user_name: str
    timestamp: DateTimeWithZ | None
    location: LocationModel
    region: str
    image_url: str
    type: EcosystemTypeEnum
    status: SubmissionStatusEnum
    ai_score: float
    ai_reasoning: str
    detected_features: list[str]
    environmental_context: str
    google_maps_url: str | None
    credits_generated: float | None
    blockchain_hash: str | None
    audit_trail: list[AuditEntryModel]
    verifier_comments: str | None

    @classmethod
    def from_domain(cls, submission: Submission) -> SubmissionResponse:
        return cls(
            id=submission.id,
            user_id=submission.user_id,
            user_name=submission.user_name,
            timestamp=submission.timestamp,
            location=LocationModel(
                lat=submission.location.lat, lng=submission.location.lng
            ),
            region=submission.region,
            image_url=submission.image_url,
            type=EcosystemTypeEnum(submission.type.value),
            status=SubmissionStatusEnum(submission.status.value),
            ai_score=submission.ai_score,
            ai_reasoning=submission.ai_reasoning,
            detected_features=list(submission.detected_features),
            environmental_context=submission.environmental_context,
            google_maps_url=submission.google_maps_url,
            credits_generated=submission.credits_generated,
            blockchain_hash=submission.blockchain_hash,
            audit_trail=[
                AuditEntryModel(
                    timestamp=entry.timestamp,
                    action=entry.action,
                    user=entry.user,
                    note=entry.note,
                )
                for entry in submission.audit_trail
            ],
            verifier_comments=submission.verifier_comments,
        )


class CreditResponse(CamelModel):
    """A credit record as served to clients."""

    id: str
    submission_id: str
    amount: float
    vintage: str
    status: str
    owner_id: str | None
    purchase_date: DateTimeWithZ | None

    @classmethod
    def from_domain(cls, credit: CreditRecord) -> CreditResponse:
        return cls(
            id=credit.id,
            submission_id=credit.submission_id,
            amount=credit.amount,
            vintage=credit.vintage,
            status=credit.status.value,
            owner_id=credit.owner_id,
            purchase_date=credit.purchase_date,
        )


class UserResponse(CamelModel):
    id: str
    name: str
    role: str
    status: UserStatusEnum
    trust_score: int
    earnings: float
    credits_purchased: float

    @classmethod
    def from_domain(cls, user: User) -> UserResponse:
        return cls(
            id=user.id,
            name=user.name,
            role=user.role.value,
            status=UserStatusEnum(user.status.value),
            trust_score=user.trust_score,
            earnings=user.earnings,
            credits_purchased=user.credits_purchased,
        )


# Requests


class CreateSubmissionRequest(CamelModel):
    """Field evidence upload.

    Attributes:
        image_base64: Base64-encoded evidence image.
        type: Claimed ecosystem type.
        location: Site coordinates; a mock location is used when absent.
        region: Region label; chosen at random when absent.
        mime_type: Image MIME type.
    """

    image_base64: str = Field(..., min_length=1)
    type: EcosystemTypeEnum
    location: LocationModel | None = None
    region: str | None = Field(default=None, max_length=200)
    mime_type: str = Field(default="image/jpeg", pattern=r"^image/[a-z0-9.+-]+$")


class StatusUpdateRequest(CamelModel):
    status: SubmissionStatusEnum
    verifier_comments: str | None = Field(default=None, max_length=2000)


class AuditorQuestionRequest(CamelModel):
    question: str = Field(..., min_length=1, max_length=2000)


class UserUpdateRequest(CamelModel):
    status: UserStatusEnum | None = None
    trust_score: int | None = Field(default=None)
    earnings: float | None = Field(default=None, ge=0.0)


# Responses


class CreateSubmissionResponse(CamelModel):
    submission: SubmissionResponse
    suggestion: str | None = Field(
        default=None, description="Oracle advice for the human verifier"
    )


class StatusUpdateResponse(CamelModel):
    submission: SubmissionResponse
    minted_credit: CreditResponse | None = None


class ReverifyResponse(CamelModel):
    submission: SubmissionResponse
    suggestion: str | None = None


class AuditorQuestionResponse(CamelModel):
    submission_id: str
    question: str
    answer: str


class PurchaseResponse(CamelModel):
    credit: CreditResponse
    buyer: UserResponse

