"""Remote sync endpoints.

Exposes outbox status and lets administrators refresh from the hosted
store or re-queue FAILED writes.
"""

from fastapi import APIRouter, Body, Depends, Request

from bluecarbon.api.dependencies.registry import (
    get_current_user,
    get_outbox,
    get_sync_service,
    require_action,
)
from bluecarbon.api.errors import problem
from bluecarbon.api.models.common import ErrorResponse
from bluecarbon.api.models.sync import (
    OutboxEntryModel,
    RefreshResponse,
    RetryRequest,
    RetryResponse,
    SyncStatusResponse,
)
from bluecarbon.application.services.persistence_outbox import PersistenceOutbox
from bluecarbon.application.services.registry_sync_service import (
    RegistrySyncService,
)
from bluecarbon.domain.errors.persistence import (
    PersistenceNotConfiguredError,
    RemotePersistenceError,
)
from bluecarbon.domain.models.user import User
from bluecarbon.domain.services.authorization_policy import Action

router = APIRouter(prefix="/v1/sync", tags=["sync"])


@router.get("", response_model=SyncStatusResponse)
async def get_sync_status(
    _user: User = Depends(get_current_user),
    outbox: PersistenceOutbox = Depends(get_outbox),
) -> SyncStatusResponse:
    """Outbox summary and entries in enqueue order."""
    summary = outbox.summary()
    return SyncStatusResponse(
        mode=summary.mode,
        pending=summary.pending,
        synced=summary.synced,
        failed=summary.failed,
        entries=[OutboxEntryModel.from_domain(e) for e in outbox.entries()],
    )


@router.post(
    "/refresh",
    response_model=RefreshResponse,
    responses={
        403: {"model": ErrorResponse},
        409: {"model": ErrorResponse, "description": "Offline mode"},
        502: {"model": ErrorResponse, "description": "Hosted store unreachable"},
    },
)
async def refresh(
    request: Request,
    _admin: User = Depends(require_action(Action.MANAGE_SYNC)),
    sync_service: RegistrySyncService = Depends(get_sync_service),
) -> RefreshResponse:
    """Merge the hosted tables into the local store (local records win)."""
    try:
        report = await sync_service.refresh()
    except PersistenceNotConfiguredError as e:
        raise problem(request, 409, "offline", "Offline Mode", str(e)) from None
    except RemotePersistenceError as e:
        raise problem(
            request, 502, "remote-unavailable", "Remote Store Unavailable", str(e)
        ) from None
    return RefreshResponse(
        submissions_added=report.submissions_added,
        credits_added=report.credits_added,
        credits_skipped=report.credits_skipped,
    )


@router.post(
    "/retry",
    response_model=RetryResponse,
    responses={403: {"model": ErrorResponse}},
)
async def retry_failed(
    body: RetryRequest | None = Body(default=None),
    _admin: User = Depends(require_action(Action.MANAGE_SYNC)),
    outbox: PersistenceOutbox = Depends(get_outbox),
) -> RetryResponse:
    """Re-queue FAILED writes and drain immediately."""
    requeued = outbox.retry_failed(body.entry_id if body else None)
    report = await outbox.drain()
    return RetryResponse(
        requeued=requeued,
        delivered=report.delivered,
        retried=report.retried,
        failed=report.failed,
    )
