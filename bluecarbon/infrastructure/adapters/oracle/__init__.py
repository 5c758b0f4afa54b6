"""Image verification oracle adapters (Gemini)."""

from bluecarbon.infrastructure.adapters.oracle.gemini_oracle import (
    GeminiVerificationOracle,
)
from bluecarbon.infrastructure.adapters.oracle.verdict_parser import parse_verdict

__all__: list[str] = ["GeminiVerificationOracle", "parse_verdict"]
