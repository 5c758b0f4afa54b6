"""Image verification oracle port.

The oracle is an external, non-deterministic image-analysis service.
Implementations never raise: any failure degrades to
VerificationVerdict.failed() or to the offline answer.
"""

from __future__ import annotations

from typing import Protocol

from bluecarbon.domain.models.submission import EcosystemType
from bluecarbon.domain.models.verification import VerificationVerdict


class VerificationOracleProtocol(Protocol):
    """Protocol for evidence image scoring and auditor Q&A."""

    async def verify_image(
        self,
        image: bytes,
        expected_type: EcosystemType,
        lat: float,
        lng: float,
    ) -> VerificationVerdict:
        """Score an evidence image against the claimed ecosystem.

        Args:
            image: Raw image bytes (JPEG).
            expected_type: Ecosystem the uploader claims.
            lat: Latitude of the site.
            lng: Longitude of the site.

        Returns:
            A verdict with every field populated.
        """
        ...

    async def ask_question(self, image: bytes, question: str) -> str:
        """Answer a free-text auditor question about an evidence image."""
        ...
