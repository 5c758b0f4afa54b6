"""Health and configuration response models."""

from pydantic import BaseModel, Field

from bluecarbon.api.models.common import CamelModel


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    persistence_mode: str = Field(..., description="online or offline")


class MapsStatusModel(CamelModel):
    """Map embed availability."""

    status: str = Field(..., description="configured or unconfigured")
    message: str | None = None


class ConfigResponse(CamelModel):
    """Public runtime configuration (no secrets)."""

    environment: str
    persistence_mode: str
    oracle_configured: bool
    maps: MapsStatusModel
    confidence_threshold: float
    default_credit_amount: float
    regions: list[str]
