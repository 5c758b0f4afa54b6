"""
Domain layer - Pure business logic for the Blue Carbon registry.

This layer contains:
- Domain models (submissions, credits, users, outbox entries)
- Domain services (authorization policy)
- Domain exceptions

CRITICAL: This layer must NOT import from application, infrastructure, or api.
Only stdlib and typing imports are allowed.
"""

from bluecarbon.domain.exceptions import BlueCarbonError

__all__: list[str] = ["BlueCarbonError"]
