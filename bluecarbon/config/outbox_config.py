"""Persistence outbox configuration.

Environment Variables:
- OUTBOX_MAX_ATTEMPTS: Delivery attempts before an entry is FAILED (default: 5)
- OUTBOX_BACKOFF_BASE_SECONDS: First retry delay (default: 2.0)
- OUTBOX_BACKOFF_MAX_SECONDS: Retry delay ceiling (default: 300.0)
- OUTBOX_DRAIN_INTERVAL_SECONDS: Background drain period (default: 5.0)
- OUTBOX_SYNCED_RETENTION: SYNCED entries kept for inspection (default: 200)
"""

from __future__ import annotations

from dataclasses import dataclass

from bluecarbon.config._env import get_float_env, get_int_env


@dataclass(frozen=True)
class OutboxConfig:
    """Retry policy for remote persistence writes.

    Attributes:
        max_attempts: Attempts before an entry is marked FAILED.
        backoff_base_seconds: Delay before the first retry.
        backoff_max_seconds: Upper bound for the retry delay.
        jitter_ratio: Maximum extra delay as a fraction of the delay.
        drain_interval_seconds: Period of the background drain loop.
        synced_retention: SYNCED entries kept after a drain; older ones are
            discarded.
    """

    max_attempts: int = 5
    backoff_base_seconds: float = 2.0
    backoff_max_seconds: float = 300.0
    jitter_ratio: float = 0.25
    drain_interval_seconds: float = 5.0
    synced_retention: int = 200

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be positive, got {self.max_attempts}")
        if self.backoff_base_seconds <= 0:
            raise ValueError(
                "backoff_base_seconds must be positive, "
                f"got {self.backoff_base_seconds}"
            )
        if self.backoff_max_seconds < self.backoff_base_seconds:
            raise ValueError(
                f"backoff_max_seconds ({self.backoff_max_seconds}) must be at least "
                f"backoff_base_seconds ({self.backoff_base_seconds})"
            )
        if not 0.0 <= self.jitter_ratio <= 1.0:
            raise ValueError(
                f"jitter_ratio must be within [0, 1], got {self.jitter_ratio}"
            )
        if self.drain_interval_seconds <= 0:
            raise ValueError(
                "drain_interval_seconds must be positive, "
                f"got {self.drain_interval_seconds}"
            )
        if self.synced_retention < 0:
            raise ValueError(
                f"synced_retention must not be negative, got {self.synced_retention}"
            )

    @classmethod
    def from_environment(cls) -> OutboxConfig:
        """Create config from environment variables with defaults."""
        return cls(
            max_attempts=get_int_env("OUTBOX_MAX_ATTEMPTS", 5),
            backoff_base_seconds=get_float_env("OUTBOX_BACKOFF_BASE_SECONDS", 2.0),
            backoff_max_seconds=get_float_env("OUTBOX_BACKOFF_MAX_SECONDS", 300.0),
            drain_interval_seconds=get_float_env(
                "OUTBOX_DRAIN_INTERVAL_SECONDS", 5.0
            ),
            synced_retention=get_int_env("OUTBOX_SYNCED_RETENTION", 200),
        )


DEFAULT_OUTBOX_CONFIG = OutboxConfig()

# Testing config: no jitter, tiny delays
TEST_OUTBOX_CONFIG = OutboxConfig(
    max_attempts=3,
    backoff_base_seconds=0.01,
    backoff_max_seconds=0.05,
    jitter_ratio=0.0,
    drain_interval_seconds=0.01,
)
