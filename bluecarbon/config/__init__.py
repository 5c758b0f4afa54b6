"""Configuration module for the Blue Carbon registry.

Available Configurations:
- LifecycleConfig: Submission lifecycle tunables
- OutboxConfig: Remote write retry policy
- IntegrationSettings: Hosted store, oracle and maps endpoints/keys
"""

from bluecarbon.config.integrations_config import (
    MAPS_UNCONFIGURED_MESSAGE,
    IntegrationSettings,
)
from bluecarbon.config.lifecycle_config import DEFAULT_LIFECYCLE_CONFIG, LifecycleConfig
from bluecarbon.config.outbox_config import (
    DEFAULT_OUTBOX_CONFIG,
    TEST_OUTBOX_CONFIG,
    OutboxConfig,
)

__all__ = [
    "DEFAULT_LIFECYCLE_CONFIG",
    "DEFAULT_OUTBOX_CONFIG",
    "MAPS_UNCONFIGURED_MESSAGE",
    "TEST_OUTBOX_CONFIG",
    "IntegrationSettings",
    "LifecycleConfig",
    "OutboxConfig",
]
