"""Domain services - pure policy objects with no infrastructure access."""

from bluecarbon.domain.services.authorization_policy import (
    Action,
    AuthorizationPolicy,
)

__all__: list[str] = ["Action", "AuthorizationPolicy"]
