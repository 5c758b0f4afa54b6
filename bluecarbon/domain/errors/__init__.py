"""Domain errors for the Blue Carbon registry.

Provides specific exception classes for different failure scenarios.
All exceptions inherit from BlueCarbonError.
"""

from bluecarbon.domain.errors.authorization import UnauthorizedActionError
from bluecarbon.domain.errors.persistence import (
    PersistenceNotConfiguredError,
    RemotePersistenceError,
)
from bluecarbon.domain.errors.registry import (
    CreditAlreadyMintedError,
    CreditAlreadySoldError,
    RecordNotFoundError,
    SubmissionNotEligibleError,
)
from bluecarbon.domain.errors.state_transition import (
    InvalidStatusTransitionError,
    SubmissionFinalizedError,
)

__all__: list[str] = [
    "CreditAlreadyMintedError",
    "CreditAlreadySoldError",
    "InvalidStatusTransitionError",
    "PersistenceNotConfiguredError",
    "RecordNotFoundError",
    "RemotePersistenceError",
    "SubmissionFinalizedError",
    "SubmissionNotEligibleError",
    "UnauthorizedActionError",
]
