"""Credit marketplace endpoints."""

from fastapi import APIRouter, Depends, Query, Request

from bluecarbon.api.dependencies.registry import (
    get_controller,
    get_current_user,
    get_store,
)
from bluecarbon.api.errors import raise_for_result
from bluecarbon.api.models.common import ErrorResponse
from bluecarbon.api.models.registry import (
    CreditResponse,
    PurchaseResponse,
    UserResponse,
)
from bluecarbon.application.services.lifecycle_controller import (
    SubmissionLifecycleController,
)
from bluecarbon.application.services.record_store import RecordStore
from bluecarbon.domain.models.credit_record import CreditStatus
from bluecarbon.domain.models.user import User

router = APIRouter(prefix="/v1/credits", tags=["credits"])


@router.get("", response_model=list[CreditResponse])
async def list_credits(
    available_only: bool = Query(default=False, alias="availableOnly"),
    _user: User = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
) -> list[CreditResponse]:
    """List credits in mint order."""
    credits = store.credits
    if available_only:
        credits = tuple(c for c in credits if c.status == CreditStatus.AVAILABLE)
    return [CreditResponse.from_domain(c) for c in credits]


@router.post(
    "/{credit_id}/purchase",
    response_model=PurchaseResponse,
    responses={
        403: {"model": ErrorResponse, "description": "Buyer is not corporate"},
        404: {"model": ErrorResponse, "description": "Credit not found"},
        409: {"model": ErrorResponse, "description": "Credit already sold"},
    },
)
async def purchase_credit(
    credit_id: str,
    request: Request,
    user: User = Depends(get_current_user),
    controller: SubmissionLifecycleController = Depends(get_controller),
) -> PurchaseResponse:
    """Buy an AVAILABLE credit (corporate only)."""
    result = controller.purchase_credit(credit_id, user)
    raise_for_result(result, request)
    buyer = controller.store.get_user(user.id) or user
    return PurchaseResponse(
        credit=CreditResponse.from_domain(result.record),
        buyer=UserResponse.from_domain(buyer),
    )
