"""Registry user domain model.

Users are seeded at startup (or loaded at login) and are never deleted.
They are mutated by Admin actions and by credit purchases.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class UserRole(Enum):
    """Role of a registry participant.

    Roles:
        FISHERMAN: Community member who uploads field evidence.
        NGO: Scientific reviewer issuing NGO-level verdicts.
        ADMIN: Registry administrator giving final approval.
        CORPORATE: Buyer of minted credits.
    """

    FISHERMAN = "FISHERMAN"
    NGO = "NGO"
    ADMIN = "ADMIN"
    CORPORATE = "CORPORATE"


class UserStatus(Enum):
    """Verification status of a user account."""

    PENDING_KYC = "PENDING_KYC"
    ACTIVE = "ACTIVE"
    VERIFIED = "VERIFIED"
    SUSPENDED = "SUSPENDED"


MIN_TRUST_SCORE: int = 0
MAX_TRUST_SCORE: int = 100


@dataclass(frozen=True, eq=True)
class User:
    """A registry participant.

    Attributes:
        id: Stable user identifier.
        name: Display name, also written into audit trail entries.
        role: The user's role.
        status: Account verification status.
        trust_score: Reviewer-assigned trust score (0-100).
        earnings: Cumulative earnings.
        credits_purchased: Cumulative tonnes of credits purchased.
    """

    id: str
    name: str
    role: UserRole
    status: UserStatus = field(default=UserStatus.ACTIVE)
    trust_score: int = field(default=MAX_TRUST_SCORE)
    earnings: float = field(default=0.0)
    credits_purchased: float = field(default=0.0)

    def __post_init__(self) -> None:
        """Validate user fields."""
        if not MIN_TRUST_SCORE <= self.trust_score <= MAX_TRUST_SCORE:
            raise ValueError(
                f"trust_score must be between {MIN_TRUST_SCORE} and "
                f"{MAX_TRUST_SCORE}, got {self.trust_score}"
            )

    @classmethod
    def seeded(cls, id: str, name: str, role: UserRole) -> User:
        """Create a user with the onboarding defaults for its role.

        Field members start unverified with a low trust score; every
        other role starts active and fully trusted.
        """
        if role == UserRole.FISHERMAN:
            return cls(
                id=id,
                name=name,
                role=role,
                status=UserStatus.PENDING_KYC,
                trust_score=45,
            )
        return cls(id=id, name=name, role=role)
