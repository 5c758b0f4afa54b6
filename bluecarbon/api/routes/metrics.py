"""Prometheus scrape endpoint."""

from fastapi import APIRouter, Depends, Response

from bluecarbon.api.dependencies.registry import get_outbox
from bluecarbon.application.services.persistence_outbox import PersistenceOutbox
from bluecarbon.infrastructure.monitoring.metrics import (
    METRICS_CONTENT_TYPE,
    generate_metrics,
)

router = APIRouter(prefix="/v1", tags=["metrics"])


@router.get(
    "/metrics",
    response_class=Response,
    responses={200: {"content": {"text/plain": {}}}},
)
async def get_metrics(
    outbox: PersistenceOutbox = Depends(get_outbox),
) -> Response:
    """Registry metrics in Prometheus text format.

    Outbox depth gauges are refreshed from the outbox before rendering,
    so a scrape reflects entries delivered by the background worker.
    """
    outbox.publish_depth()
    return Response(content=generate_metrics(), media_type=METRICS_CONTENT_TYPE)
