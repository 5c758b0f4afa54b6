"""User endpoints.

Users are local to the process. Listing and updating users is an admin
action; every user can read their own record.
"""

from fastapi import APIRouter, Depends, Request

from bluecarbon.api.dependencies.registry import (
    get_controller,
    get_current_user,
    get_store,
    require_action,
)
from bluecarbon.api.errors import raise_for_result
from bluecarbon.api.models.common import ErrorResponse
from bluecarbon.api.models.registry import UserResponse, UserUpdateRequest
from bluecarbon.application.services.lifecycle_controller import (
    SubmissionLifecycleController,
)
from bluecarbon.application.services.record_store import RecordStore
from bluecarbon.domain.models.user import User, UserStatus
from bluecarbon.domain.services.authorization_policy import Action

router = APIRouter(prefix="/v1/users", tags=["users"])


@router.get(
    "",
    response_model=list[UserResponse],
    responses={403: {"model": ErrorResponse}},
)
async def list_users(
    _admin: User = Depends(require_action(Action.MANAGE_USERS)),
    store: RecordStore = Depends(get_store),
) -> list[UserResponse]:
    return [UserResponse.from_domain(user) for user in store.users]


@router.get("/me", response_model=UserResponse)
async def get_me(user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.from_domain(user)


@router.patch(
    "/{user_id}",
    response_model=UserResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_user(
    user_id: str,
    body: UserUpdateRequest,
    request: Request,
    actor: User = Depends(get_current_user),
    controller: SubmissionLifecycleController = Depends(get_controller),
) -> UserResponse:
    """Update a user's status, trust score or earnings (admin only)."""
    result = controller.update_user(
        user_id,
        actor,
        status=UserStatus(body.status.value) if body.status else None,
        trust_score=body.trust_score,
        earnings=body.earnings,
    )
    raise_for_result(result, request)
    return UserResponse.from_domain(result.record)
