"""Public runtime configuration endpoint.

Reports which integrations are available without exposing any key. A
missing maps key is reported as "unconfigured" with an explanatory
message instead of failing.
"""

from fastapi import APIRouter, Depends

from bluecarbon.api.dependencies.registry import (
    get_integration_settings,
    get_lifecycle_config,
    get_outbox,
)
from bluecarbon.api.models.health import ConfigResponse, MapsStatusModel
from bluecarbon.application.services.persistence_outbox import PersistenceOutbox
from bluecarbon.config.integrations_config import (
    MAPS_UNCONFIGURED_MESSAGE,
    IntegrationSettings,
)
from bluecarbon.config.lifecycle_config import LifecycleConfig

router = APIRouter(prefix="/v1", tags=["config"])


@router.get("/config", response_model=ConfigResponse)
async def get_config(
    settings: IntegrationSettings = Depends(get_integration_settings),
    lifecycle: LifecycleConfig = Depends(get_lifecycle_config),
    outbox: PersistenceOutbox = Depends(get_outbox),
) -> ConfigResponse:
    """Return integration availability and lifecycle tunables."""
    maps = (
        MapsStatusModel(status="configured")
        if settings.maps_configured
        else MapsStatusModel(status="unconfigured", message=MAPS_UNCONFIGURED_MESSAGE)
    )
    return ConfigResponse(
        environment=settings.environment,
        persistence_mode=outbox.mode,
        oracle_configured=settings.oracle_configured,
        maps=maps,
        confidence_threshold=lifecycle.confidence_threshold,
        default_credit_amount=lifecycle.default_credit_amount,
        regions=list(lifecycle.regions),
    )
