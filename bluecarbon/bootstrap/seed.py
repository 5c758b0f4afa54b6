"""Seed users loaded into every new record store.

Users are local to the process and are not mirrored to the hosted store.
"""

from __future__ import annotations

from bluecarbon.domain.models.user import User, UserRole

SEED_FISHERMAN_ID = "u-fisherman-1"
SEED_NGO_ID = "u-ngo-1"
SEED_ADMIN_ID = "u-admin-1"
SEED_CORPORATE_ID = "u-corp-1"


def seed_users() -> list[User]:
    """One user per role, with the onboarding defaults of that role."""
    return [
        User.seeded(SEED_FISHERMAN_ID, "Wayan Sudarsana", UserRole.FISHERMAN),
        User.seeded(SEED_NGO_ID, "Coastal Guardians NGO", UserRole.NGO),
        User.seeded(SEED_ADMIN_ID, "Registry Administrator", UserRole.ADMIN),
        User.seeded(SEED_CORPORATE_ID, "Oceanic Logistics Corp", UserRole.CORPORATE),
    ]
