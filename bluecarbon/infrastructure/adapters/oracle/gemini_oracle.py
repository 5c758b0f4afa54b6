"""Gemini implementation of the image verification oracle.

Calls the Gemini `generateContent` REST endpoint over httpx. Verification
uses Maps grounding at the target coordinates; the map reference is the
first grounding chunk carrying a `maps.uri`.

Failure policy: the oracle never raises. A missing key, network error,
HTTP error or unreadable response body degrades to
VerificationVerdict.failed() (verification) or ORACLE_OFFLINE_ANSWER
(questions).
"""

from __future__ import annotations

import base64
from typing import Any

import httpx

from bluecarbon.application.services.base import LoggingMixin
from bluecarbon.domain.models.submission import EcosystemType
from bluecarbon.domain.models.verification import (
    ORACLE_OFFLINE_ANSWER,
    VerificationVerdict,
)
from bluecarbon.infrastructure.adapters.oracle.verdict_parser import parse_verdict

GEMINI_API_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
IMAGE_MIME_TYPE = "image/jpeg"

VERIFY_SYSTEM_INSTRUCTION = (
    "You are a professional Blue Carbon auditor. Use rigorous ecological "
    "standards. Be critical of visual evidence to prevent double-counting and "
    "fraud. When using Maps grounding, prioritize satellite layer analysis."
)

QA_SYSTEM_INSTRUCTION = (
    "Answer based strictly on pixel evidence. If specific indicators like "
    "propagule health or sediment carbon markers are visible, highlight them."
)

VERIFY_PROMPT_TEMPLATE = """You are a Senior Marine Ecologist and dMRV (Digital Monitoring, Reporting, and Verification) Auditor.
Analyze this coastal restoration evidence for {expected_type} validity.
Target Coordinates: {lat}, {lng}.

Task:
1. Identify species-specific markers (e.g., pneumatophores/prop roots for mangroves, leaf blade density for seagrass).
2. Evaluate sediment health and hydration levels.
3. Check for pixel anomalies that might suggest image tampering.
4. Cross-reference the visual biometrics with expected coastal conditions at these coordinates.

Return your finding EXACTLY in this format:
VERDICT: [CONFIDENCE SCORE 0-1]
REASONING: [Scientific breakdown of visual evidence, biomass indicators, and sequestration potential]
FEATURES: [comma-separated list of detected markers like "Aerial Roots", "Lush Canopy", "Propagules", "Carbon-Rich Sediment"]
CONTEXT: [Ecosystem classification: "Intertidal Mudflat", "Subtidal Meadow", "Estuarine Fringe"]
SUGGESTION: [Specific technical advice for a human verifier]"""

QA_PROMPT_TEMPLATE = (
    "As a professional marine biologist auditor, answer this interrogation "
    "question about the site evidence: {question}"
)


def _response_text(body: dict[str, Any]) -> str:
    """Concatenate the text parts of the first candidate."""
    candidates = body.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts if isinstance(part, dict))


def _map_reference(body: dict[str, Any]) -> str | None:
    """URI of the first grounding chunk that carries a map reference."""
    candidates = body.get("candidates") or []
    if not candidates:
        return None
    metadata = candidates[0].get("groundingMetadata") or {}
    for chunk in metadata.get("groundingChunks") or []:
        uri = (chunk.get("maps") or {}).get("uri")
        if uri:
            return str(uri)
    return None


class GeminiVerificationOracle(LoggingMixin):
    """Image oracle backed by the Gemini REST API.

    Attributes:
        _api_key: Gemini API key; None disables network calls.
        _client: Optional shared httpx client (tests inject a mock transport).
    """

    def __init__(
        self,
        api_key: str | None,
        verify_model: str = "gemini-2.5-flash",
        qa_model: str = "gemini-3-flash-preview",
        timeout_seconds: float = 60.0,
        client: httpx.AsyncClient | None = None,
        base_url: str = GEMINI_API_BASE_URL,
    ) -> None:
        self._api_key = api_key
        self._verify_model = verify_model
        self._qa_model = qa_model
        self._timeout = timeout_seconds
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._init_logger(component="oracle")

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def verify_image(
        self,
        image: bytes,
        expected_type: EcosystemType,
        lat: float,
        lng: float,
    ) -> VerificationVerdict:
        log = self._log_operation(
            "verify_image", expected_type=expected_type.value, lat=lat, lng=lng
        )
        if not self.configured:
            log.warning("oracle_not_configured")
            return VerificationVerdict.failed()

        request = {
            "contents": [
                {
                    "parts": [
                        self._image_part(image),
                        {
                            "text": VERIFY_PROMPT_TEMPLATE.format(
                                expected_type=expected_type.value, lat=lat, lng=lng
                            )
                        },
                    ]
                }
            ],
            "tools": [{"googleMaps": {}}],
            "toolConfig": {
                "retrievalConfig": {"latLng": {"latitude": lat, "longitude": lng}}
            },
            "systemInstruction": {"parts": [{"text": VERIFY_SYSTEM_INSTRUCTION}]},
        }

        try:
            body = await self._generate(self._verify_model, request)
        except (httpx.HTTPError, ValueError) as e:
            log.error("oracle_verification_failed", error=str(e))
            return VerificationVerdict.failed()

        verdict = parse_verdict(_response_text(body), _map_reference(body))
        log.info(
            "oracle_verdict_received",
            confidence=verdict.confidence,
            features=len(verdict.detected_features),
            map_reference=verdict.map_reference is not None,
        )
        return verdict

    async def ask_question(self, image: bytes, question: str) -> str:
        log = self._log_operation("ask_question", question_length=len(question))
        if not self.configured:
            log.warning("oracle_not_configured")
            return ORACLE_OFFLINE_ANSWER

        request = {
            "contents": [
                {
                    "parts": [
                        self._image_part(image),
                        {"text": QA_PROMPT_TEMPLATE.format(question=question)},
                    ]
                }
            ],
            "systemInstruction": {"parts": [{"text": QA_SYSTEM_INSTRUCTION}]},
        }

        try:
            body = await self._generate(self._qa_model, request)
        except (httpx.HTTPError, ValueError) as e:
            log.error("oracle_question_failed", error=str(e))
            return ORACLE_OFFLINE_ANSWER

        return _response_text(body)

    @staticmethod
    def _image_part(image: bytes) -> dict[str, Any]:
        return {
            "inlineData": {
                "mimeType": IMAGE_MIME_TYPE,
                "data": base64.b64encode(image).decode("ascii"),
            }
        }

    async def _generate(self, model: str, request: dict[str, Any]) -> dict[str, Any]:
        """POST a generateContent request and return the decoded body.

        Raises:
            httpx.HTTPError: On transport failure or non-2xx status.
            ValueError: If the body is not a JSON object.
        """
        url = f"{self._base_url}/models/{model}:generateContent"
        headers = {"x-goog-api-key": self._api_key or ""}

        if self._client is not None:
            response = await self._client.post(
                url, json=request, headers=headers, timeout=self._timeout
            )
        else:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    url, json=request, headers=headers, timeout=self._timeout
                )

        response.raise_for_status()
        body = response.json()
        if not isinstance(body, dict):
            raise ValueError("generateContent response is not a JSON object")
        return body
