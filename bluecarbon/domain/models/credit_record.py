"""Credit record domain model.

A CreditRecord is minted exactly once when its originating submission is
approved, and is mutated only by a purchase (AVAILABLE -> SOLD).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum


class CreditStatus(Enum):
    """Marketplace status of a credit."""

    AVAILABLE = "AVAILABLE"
    SOLD = "SOLD"


@dataclass(frozen=True, eq=True)
class CreditRecord:
    """A purchasable unit of verified sequestered carbon.

    Attributes:
        id: Unique identifier ("c-...").
        submission_id: Originating submission.
        amount: Tonnes CO2e.
        vintage: Four-digit vintage year.
        status: AVAILABLE or SOLD.
        owner_id: Buyer, once sold.
        purchase_date: Purchase time, once sold.
    """

    id: str
    submission_id: str
    amount: float
    vintage: str
    status: CreditStatus = field(default=CreditStatus.AVAILABLE)
    owner_id: str | None = field(default=None)
    purchase_date: datetime | None = field(default=None)

    def __post_init__(self) -> None:
        """Validate credit fields."""
        if self.amount <= 0:
            raise ValueError(f"Credit amount must be positive, got {self.amount}")

    @property
    def is_available(self) -> bool:
        return self.status == CreditStatus.AVAILABLE

    def sold_to(self, owner_id: str, purchase_date: datetime) -> CreditRecord:
        """Return the SOLD copy of this credit.

        Raises:
            CreditAlreadySoldError: If the credit was already sold.
        """
        from bluecarbon.domain.errors.registry import CreditAlreadySoldError

        if not self.is_available:
            raise CreditAlreadySoldError(credit_id=self.id, owner_id=self.owner_id)
        return replace(
            self,
            status=CreditStatus.SOLD,
            owner_id=owner_id,
            purchase_date=purchase_date,
        )
