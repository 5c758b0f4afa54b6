"""Health check endpoint."""

from fastapi import APIRouter, Depends

from bluecarbon import __version__
from bluecarbon.api.dependencies.registry import get_outbox
from bluecarbon.api.models.health import HealthResponse
from bluecarbon.application.services.persistence_outbox import PersistenceOutbox

router = APIRouter(prefix="/v1", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    outbox: PersistenceOutbox = Depends(get_outbox),
) -> HealthResponse:
    """Return health status and the persistence mode."""
    return HealthResponse(
        status="healthy", version=__version__, persistence_mode=outbox.mode
    )
