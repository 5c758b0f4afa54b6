"""External integration settings: hosted store, image oracle, maps.

Environment Variables:
- SUPABASE_URL / SUPABASE_ANON_KEY: Hosted table store. Missing values, or a
  URL containing "placeholder", select offline (local-only) mode.
- GEMINI_API_KEY (fallback: API_KEY): Image verification oracle key.
- GEMINI_VERIFY_MODEL (default: gemini-2.5-flash)
- GEMINI_QA_MODEL (default: gemini-3-flash-preview)
- ORACLE_TIMEOUT_SECONDS (default: 60)
- GOOGLE_MAPS_API_KEY: Map embed key. Missing key degrades the map view.
- ENVIRONMENT (default: development)
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from bluecarbon.config._env import get_float_env, get_str_env

MAPS_UNCONFIGURED_MESSAGE = (
    "GOOGLE_MAPS_API_KEY is not configured in environment variables."
)


@dataclass(frozen=True)
class IntegrationSettings:
    """Endpoints and keys for the external collaborators.

    Attributes:
        supabase_url: Hosted store URL.
        supabase_key: Hosted store anon key.
        oracle_api_key: Gemini API key.
        verify_model: Model used for image verification.
        qa_model: Model used for auditor questions.
        oracle_timeout_seconds: HTTP timeout for oracle calls.
        maps_api_key: Google Maps embed key.
        environment: Deployment environment name.
    """

    supabase_url: str | None = None
    supabase_key: str | None = None
    oracle_api_key: str | None = None
    verify_model: str = "gemini-2.5-flash"
    qa_model: str = "gemini-3-flash-preview"
    oracle_timeout_seconds: float = 60.0
    maps_api_key: str | None = None
    environment: str = "development"

    @property
    def persistence_configured(self) -> bool:
        """Whether the hosted store can be used (otherwise offline mode)."""
        if not self.supabase_url or not self.supabase_key:
            return False
        return "placeholder" not in self.supabase_url

    @property
    def oracle_configured(self) -> bool:
        return bool(self.oracle_api_key)

    @property
    def maps_configured(self) -> bool:
        return bool(self.maps_api_key)

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in {"prod", "production"}

    @classmethod
    def from_environment(cls) -> IntegrationSettings:
        """Create settings from environment variables."""
        return cls(
            supabase_url=get_str_env("SUPABASE_URL"),
            supabase_key=get_str_env("SUPABASE_ANON_KEY", "SUPABASE_KEY"),
            oracle_api_key=get_str_env("GEMINI_API_KEY", "API_KEY"),
            verify_model=get_str_env("GEMINI_VERIFY_MODEL") or "gemini-2.5-flash",
            qa_model=get_str_env("GEMINI_QA_MODEL") or "gemini-3-flash-preview",
            oracle_timeout_seconds=get_float_env("ORACLE_TIMEOUT_SECONDS", 60.0),
            maps_api_key=get_str_env("GOOGLE_MAPS_API_KEY"),
            environment=os.environ.get("ENVIRONMENT", "development"),
        )
