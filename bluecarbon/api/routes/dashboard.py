"""Role dashboard endpoint.

Returns the projection of the registry for the acting user's role.
"""

from fastapi import APIRouter, Depends

from bluecarbon.api.dependencies.registry import get_current_user, get_role_views
from bluecarbon.api.models.dashboard import (
    AdminDashboardResponse,
    CorporateDashboardResponse,
    DashboardResponse,
    FishermanDashboardResponse,
    NgoDashboardResponse,
    RegistryTotalsModel,
)
from bluecarbon.api.models.registry import (
    CreditResponse,
    SubmissionResponse,
    UserResponse,
)
from bluecarbon.application.services.role_views import (
    AdminView,
    FishermanView,
    NgoView,
    RoleViewService,
)
from bluecarbon.domain.models.user import User

router = APIRouter(prefix="/v1", tags=["dashboard"])


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    user: User = Depends(get_current_user),
    views: RoleViewService = Depends(get_role_views),
) -> DashboardResponse:
    view = views.for_user(user)
    me = UserResponse.from_domain(user)

    if isinstance(view, FishermanView):
        return FishermanDashboardResponse(
            user=me,
            submissions=[SubmissionResponse.from_domain(s) for s in view.submissions],
            approved_count=view.approved_count,
            credits_generated=view.credits_generated,
        )
    if isinstance(view, NgoView):
        return NgoDashboardResponse(
            user=me,
            queue=[SubmissionResponse.from_domain(s) for s in view.queue],
            history=[SubmissionResponse.from_domain(s) for s in view.history],
        )
    if isinstance(view, AdminView):
        totals = view.totals
        return AdminDashboardResponse(
            user=me,
            submissions=[SubmissionResponse.from_domain(s) for s in view.submissions],
            credits=[CreditResponse.from_domain(c) for c in view.credits],
            users=[UserResponse.from_domain(u) for u in view.users],
            totals=RegistryTotalsModel(
                submissions=totals.submissions,
                approved=totals.approved,
                in_review=totals.in_review,
                rejected=totals.rejected,
                credits_minted=totals.credits_minted,
                credits_sold=totals.credits_sold,
                users=totals.users,
            ),
        )
    return CorporateDashboardResponse(
        user=me,
        marketplace=[CreditResponse.from_domain(c) for c in view.marketplace],
        owned=[CreditResponse.from_domain(c) for c in view.owned],
    )
