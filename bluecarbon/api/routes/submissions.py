"""Submission endpoints.

Field members upload evidence; NGO and admin reviewers move submissions
through the lifecycle, re-run oracle screening and question the oracle.
Every write goes through the SubmissionLifecycleController; its
non-applied outcomes become RFC 7807 errors (403/404/409).
"""

import base64
import binascii

from fastapi import APIRouter, Depends, Query, Request

from bluecarbon.api.dependencies.registry import (
    get_controller,
    get_current_user,
    get_policy,
    get_store,
)
from bluecarbon.api.errors import problem, raise_for_result
from bluecarbon.api.models.common import ErrorResponse
from bluecarbon.api.models.registry import (
    AuditorQuestionRequest,
    AuditorQuestionResponse,
    CreateSubmissionRequest,
    CreateSubmissionResponse,
    CreditResponse,
    ReverifyResponse,
    StatusUpdateRequest,
    StatusUpdateResponse,
    SubmissionResponse,
    SubmissionStatusEnum,
)
from bluecarbon.application.services.lifecycle_controller import (
    SubmissionLifecycleController,
)
from bluecarbon.application.services.record_store import RecordStore
from bluecarbon.domain.models.submission import (
    EcosystemType,
    GeoPoint,
    Submission,
    SubmissionStatus,
)
from bluecarbon.domain.models.user import User
from bluecarbon.domain.services.authorization_policy import (
    Action,
    AuthorizationPolicy,
)

router = APIRouter(prefix="/v1/submissions", tags=["submissions"])

_ERRORS = {
    403: {"model": ErrorResponse, "description": "Role may not perform this action"},
    404: {"model": ErrorResponse, "description": "Submission not found"},
    409: {"model": ErrorResponse, "description": "Transition or state conflict"},
}


def _can_view(user: User, submission: Submission, policy: AuthorizationPolicy) -> bool:
    return submission.user_id == user.id or policy.is_allowed(
        user, Action.VIEW_REGISTRY
    )


@router.get(
    "",
    response_model=list[SubmissionResponse],
    responses={403: _ERRORS[403]},
)
async def list_submissions(
    request: Request,
    status: SubmissionStatusEnum | None = Query(default=None),
    user: User = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
    policy: AuthorizationPolicy = Depends(get_policy),
) -> list[SubmissionResponse]:
    """List submissions newest first.

    Reviewers see every submission; field members see their own.
    """
    if policy.is_allowed(user, Action.VIEW_REGISTRY):
        submissions = list(store.submissions)
    elif policy.is_allowed(user, Action.CREATE_SUBMISSION):
        submissions = [s for s in store.submissions if s.user_id == user.id]
    else:
        raise problem(
            request,
            403,
            "forbidden",
            "Forbidden",
            f"Role {user.role.value} may not list submissions",
        )

    if status is not None:
        submissions = [s for s in submissions if s.status.value == status.value]
    return [SubmissionResponse.from_domain(s) for s in submissions]


@router.post(
    "",
    response_model=CreateSubmissionResponse,
    status_code=201,
    responses={400: {"model": ErrorResponse}, 403: _ERRORS[403]},
)
async def create_submission(
    body: CreateSubmissionRequest,
    request: Request,
    user: User = Depends(get_current_user),
    controller: SubmissionLifecycleController = Depends(get_controller),
) -> CreateSubmissionResponse:
    """Upload field evidence. The oracle screens it before it is stored."""
    try:
        image = base64.b64decode(body.image_base64, validate=True)
    except (binascii.Error, ValueError):
        raise problem(
            request,
            400,
            "invalid-image",
            "Invalid Image",
            "imageBase64 is not valid base64",
        ) from None
    if not image:
        raise problem(request, 400, "invalid-image", "Invalid Image", "Image is empty")

    result = await controller.create_submission(
        image=image,
        ecosystem_type=EcosystemType(body.type.value),
        actor=user,
        coordinates=(
            GeoPoint(lat=body.location.lat, lng=body.location.lng)
            if body.location
            else None
        ),
        region=body.region,
        mime_type=body.mime_type,
    )
    raise_for_result(result, request)
    return CreateSubmissionResponse(
        submission=SubmissionResponse.from_domain(result.record),
        suggestion=result.detail,
    )


@router.get(
    "/{submission_id}",
    response_model=SubmissionResponse,
    responses={403: _ERRORS[403], 404: _ERRORS[404]},
)
async def get_submission(
    submission_id: str,
    request: Request,
    user: User = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
    policy: AuthorizationPolicy = Depends(get_policy),
) -> SubmissionResponse:
    submission = store.get_submission(submission_id)
    if submission is None:
        raise problem(
            request,
            404,
            "not-found",
            "Not Found",
            f"Submission not found: {submission_id}",
        )
    if not _can_view(user, submission, policy):
        raise problem(
            request,
            403,
            "forbidden",
            "Forbidden",
            f"Role {user.role.value} may not view this submission",
        )
    return SubmissionResponse.from_domain(submission)


@router.post(
    "/{submission_id}/status",
    response_model=StatusUpdateResponse,
    responses=_ERRORS,
)
async def update_submission_status(
    submission_id: str,
    body: StatusUpdateRequest,
    request: Request,
    user: User = Depends(get_current_user),
    controller: SubmissionLifecycleController = Depends(get_controller),
) -> StatusUpdateResponse:
    """Apply an NGO or admin verdict. Final approval mints the credit."""
    result = controller.update_submission_status(
        submission_id,
        SubmissionStatus(body.status.value),
        user,
        verifier_comments=body.verifier_comments,
    )
    raise_for_result(result, request)

    minted = None
    if result.record.status == SubmissionStatus.APPROVED:
        credit = controller.store.credit_for_submission(submission_id)
        minted = CreditResponse.from_domain(credit) if credit else None
    return StatusUpdateResponse(
        submission=SubmissionResponse.from_domain(result.record),
        minted_credit=minted,
    )


@router.post(
    "/{submission_id}/reverify",
    response_model=ReverifyResponse,
    responses=_ERRORS,
)
async def reverify_submission(
    submission_id: str,
    request: Request,
    user: User = Depends(get_current_user),
    controller: SubmissionLifecycleController = Depends(get_controller),
) -> ReverifyResponse:
    """Re-run oracle screening on a PENDING submission (NGO only)."""
    result = await controller.reverify_submission(submission_id, user)
    raise_for_result(result, request)
    return ReverifyResponse(
        submission=SubmissionResponse.from_domain(result.record),
        suggestion=result.detail,
    )


@router.post(
    "/{submission_id}/questions",
    response_model=AuditorQuestionResponse,
    responses=_ERRORS,
)
async def ask_auditor_question(
    submission_id: str,
    body: AuditorQuestionRequest,
    request: Request,
    user: User = Depends(get_current_user),
    controller: SubmissionLifecycleController = Depends(get_controller),
) -> AuditorQuestionResponse:
    """Ask the oracle a question about a submission's evidence image."""
    result = await controller.ask_auditor_question(submission_id, body.question, user)
    raise_for_result(result, request)
    return AuditorQuestionResponse(
        submission_id=submission_id,
        question=body.question,
        answer=result.detail or "",
    )
