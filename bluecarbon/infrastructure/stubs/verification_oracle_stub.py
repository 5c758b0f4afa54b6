"""In-memory stub of the image verification oracle.

Testing Features:
- Fixed verdict (or confidence) per stub instance
- Simulated outage: failed verdict and offline answer
- Call tracking for assertions
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from bluecarbon.application.ports.verification_oracle import (
    VerificationOracleProtocol,
)
from bluecarbon.domain.models.submission import EcosystemType
from bluecarbon.domain.models.verification import (
    ORACLE_OFFLINE_ANSWER,
    VerificationVerdict,
)

DEFAULT_STUB_ANSWER = "Pneumatophores are visible along the sediment line."


@dataclass(frozen=True)
class VerifyCall:
    image: bytes
    expected_type: EcosystemType
    lat: float
    lng: float


class VerificationOracleStub(VerificationOracleProtocol):
    """Deterministic oracle. NOT suitable for production use."""

    def __init__(
        self,
        verdict: VerificationVerdict | None = None,
        answer: str = DEFAULT_STUB_ANSWER,
    ) -> None:
        self.verdict = verdict or VerificationVerdict()
        self.answer = answer
        self.offline = False
        self.verify_calls: list[VerifyCall] = []
        self.questions: list[str] = []

    def set_confidence(self, confidence: float) -> None:
        self.verdict = replace(self.verdict, confidence=confidence)

    def set_offline(self, offline: bool = True) -> None:
        self.offline = offline

    async def verify_image(
        self,
        image: bytes,
        expected_type: EcosystemType,
        lat: float,
        lng: float,
    ) -> VerificationVerdict:
        self.verify_calls.append(VerifyCall(image, expected_type, lat, lng))
        if self.offline:
            return VerificationVerdict.failed()
        return self.verdict

    async def ask_question(self, image: bytes, question: str) -> str:
        self.questions.append(question)
        if self.offline:
            return ORACLE_OFFLINE_ANSWER
        return self.answer
