"""Submission lifecycle configuration.

Environment Variables:
- AI_CONFIDENCE_THRESHOLD: Minimum oracle confidence for AI_VERIFIED (default: 0.7)
- DEFAULT_CREDIT_AMOUNT: Credit amount when a submission states none (default: 1.0)
"""

from __future__ import annotations

from dataclasses import dataclass

from bluecarbon.config._env import get_float_env


@dataclass(frozen=True)
class LifecycleConfig:
    """Configuration for the submission lifecycle controller.

    Attributes:
        confidence_threshold: Oracle confidence at or above which a new
            submission starts AI_VERIFIED instead of PENDING.
        default_credit_amount: Amount minted when a submission's
            credits_generated is missing or zero.
        default_location: Fallback coordinates (lat, lng) for uploads
            without a position fix.
        location_jitter: Maximum absolute jitter in degrees applied to the
            fallback coordinates.
        regions: Region labels assigned to new submissions.
    """

    confidence_threshold: float = 0.7
    default_credit_amount: float = 1.0
    default_location: tuple[float, float] = (-8.4095, 115.1889)
    location_jitter: float = 0.025
    regions: tuple[str, ...] = ("North Coast Basin", "Eastern Mangrove Delta")

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not 0.0 <= self.confidence_threshold <= 1.0:
            raise ValueError(
                "confidence_threshold must be within [0, 1], "
                f"got {self.confidence_threshold}"
            )
        if self.default_credit_amount <= 0:
            raise ValueError(
                "default_credit_amount must be positive, "
                f"got {self.default_credit_amount}"
            )
        if self.location_jitter < 0:
            raise ValueError(
                f"location_jitter must be non-negative, got {self.location_jitter}"
            )
        if not self.regions:
            raise ValueError("regions must not be empty")

    @classmethod
    def from_environment(cls) -> LifecycleConfig:
        """Create config from environment variables with defaults."""
        return cls(
            confidence_threshold=get_float_env("AI_CONFIDENCE_THRESHOLD", 0.7),
            default_credit_amount=get_float_env("DEFAULT_CREDIT_AMOUNT", 1.0),
        )


DEFAULT_LIFECYCLE_CONFIG = LifecycleConfig()
