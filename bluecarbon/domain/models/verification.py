"""Verification verdict returned by the image oracle.

The oracle is untrusted and non-deterministic. Every missing or malformed
field has a documented default, and a total failure has its own fixed
verdict, so callers always receive a usable value.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

DEFAULT_CONFIDENCE: float = 0.8
DEFAULT_REASONING = (
    "Analysis indicates standard biomass distribution for coastal regions."
)
DEFAULT_FEATURES: tuple[str, ...] = ("Coastal Vegetation",)
DEFAULT_CONTEXT = "Coastal ecosystem"
DEFAULT_SUGGESTION = "Standard approval recommended based on visual consistency."

FAILED_REASONING = "Analysis requires manual audit due to API communication limits."
FAILED_CONTEXT = "Unknown"
FAILED_SUGGESTION = "Request fresh field data or manual site visit."

ORACLE_OFFLINE_ANSWER = (
    "The ecological oracle is currently offline. "
    "Please refer to standard MRV guidelines."
)
EMPTY_ANSWER = "Analysis complete."


def clamp_confidence(value: float) -> float:
    """Clamp a confidence into [0, 1]; NaN becomes the default."""
    if math.isnan(value):
        return DEFAULT_CONFIDENCE
    return min(1.0, max(0.0, value))


@dataclass(frozen=True, eq=True)
class VerificationVerdict:
    """Structured oracle verdict.

    Attributes:
        confidence: Confidence score in [0, 1].
        reasoning: Scientific rationale.
        detected_features: Detected species markers.
        environmental_context: Ecosystem classification.
        suggestion: Advice for the human verifier.
        map_reference: Optional external map URI.
        degraded: True when the oracle call failed entirely.
    """

    confidence: float = DEFAULT_CONFIDENCE
    reasoning: str = DEFAULT_REASONING
    detected_features: tuple[str, ...] = DEFAULT_FEATURES
    environmental_context: str = DEFAULT_CONTEXT
    suggestion: str = DEFAULT_SUGGESTION
    map_reference: str | None = None
    degraded: bool = field(default=False)

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(
                f"confidence must be within [0, 1], got {self.confidence}"
            )

    @classmethod
    def failed(cls) -> VerificationVerdict:
        """Verdict used when the oracle could not be reached at all."""
        return cls(
            confidence=0.0,
            reasoning=FAILED_REASONING,
            detected_features=(),
            environmental_context=FAILED_CONTEXT,
            suggestion=FAILED_SUGGESTION,
            map_reference=None,
            degraded=True,
        )

    def passes(self, threshold: float) -> bool:
        """Whether the verdict clears the AI verification threshold."""
        return self.confidence >= threshold
