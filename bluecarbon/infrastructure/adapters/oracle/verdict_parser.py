"""Parser for the oracle's labelled verdict template.

The model is asked to answer in exactly this layout:

    VERDICT: <confidence 0-1>
    REASONING: <text>
    FEATURES: <comma-separated markers>
    CONTEXT: <ecosystem classification>
    SUGGESTION: <advice for the human verifier>

Labels are matched case-insensitively. Any missing or malformed field
falls back to its documented default; confidences are clamped to [0, 1].
"""

from __future__ import annotations

import re

from bluecarbon.domain.models.verification import (
    DEFAULT_CONFIDENCE,
    DEFAULT_CONTEXT,
    DEFAULT_FEATURES,
    DEFAULT_REASONING,
    DEFAULT_SUGGESTION,
    VerificationVerdict,
    clamp_confidence,
)

_VERDICT_RE = re.compile(r"VERDICT:\s*(\d+(?:\.\d+)?|\.\d+)", re.IGNORECASE)
_REASONING_RE = re.compile(r"REASONING:\s*([\s\S]*?)(?=FEATURES:|$)", re.IGNORECASE)
_FEATURES_RE = re.compile(r"FEATURES:\s*([\s\S]*?)(?=CONTEXT:|$)", re.IGNORECASE)
_CONTEXT_RE = re.compile(r"CONTEXT:\s*([\s\S]*?)(?=SUGGESTION:|$)", re.IGNORECASE)
_SUGGESTION_RE = re.compile(r"SUGGESTION:\s*([\s\S]*?)$", re.IGNORECASE)


def _parse_confidence(text: str) -> float:
    match = _VERDICT_RE.search(text)
    if match is None:
        return DEFAULT_CONFIDENCE
    try:
        return clamp_confidence(float(match.group(1)))
    except ValueError:
        return DEFAULT_CONFIDENCE


def _parse_text(pattern: re.Pattern[str], text: str, default: str) -> str:
    match = pattern.search(text)
    return match.group(1).strip() if match else default


def _parse_features(text: str) -> tuple[str, ...]:
    match = _FEATURES_RE.search(text)
    if match is None:
        return DEFAULT_FEATURES
    return tuple(
        feature.strip() for feature in match.group(1).split(",") if feature.strip()
    )


def parse_verdict(text: str, map_reference: str | None = None) -> VerificationVerdict:
    """Parse model output into a verdict with every field populated."""
    return VerificationVerdict(
        confidence=_parse_confidence(text),
        reasoning=_parse_text(_REASONING_RE, text, DEFAULT_REASONING),
        detected_features=_parse_features(text),
        environmental_context=_parse_text(_CONTEXT_RE, text, DEFAULT_CONTEXT),
        suggestion=_parse_text(_SUGGESTION_RE, text, DEFAULT_SUGGESTION),
        map_reference=map_reference,
    )
