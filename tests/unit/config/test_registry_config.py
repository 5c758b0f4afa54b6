"""Unit tests for registry configuration objects."""

import pytest

from bluecarbon.config import (
    DEFAULT_OUTBOX_CONFIG,
    IntegrationSettings,
    LifecycleConfig,
    OutboxConfig,
)

INTEGRATION_VARS = (
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "SUPABASE_KEY",
    "GEMINI_API_KEY",
    "API_KEY",
    "GEMINI_VERIFY_MODEL",
    "GEMINI_QA_MODEL",
    "ORACLE_TIMEOUT_SECONDS",
    "GOOGLE_MAPS_API_KEY",
    "ENVIRONMENT",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in INTEGRATION_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestIntegrationSettings:
    """Tests for IntegrationSettings."""

    def test_empty_environment_is_offline(self, clean_env: pytest.MonkeyPatch) -> None:
        settings = IntegrationSettings.from_environment()

        assert not settings.persistence_configured
        assert not settings.oracle_configured
        assert not settings.maps_configured
        assert settings.verify_model == "gemini-2.5-flash"
        assert settings.qa_model == "gemini-3-flash-preview"
        assert settings.environment == "development"

    def test_full_environment(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("SUPABASE_URL", "https://abc.supabase.co")
        clean_env.setenv("SUPABASE_ANON_KEY", "anon")
        clean_env.setenv("GEMINI_API_KEY", "gem")
        clean_env.setenv("GOOGLE_MAPS_API_KEY", "maps")
        clean_env.setenv("ORACLE_TIMEOUT_SECONDS", "12.5")
        clean_env.setenv("ENVIRONMENT", "production")

        settings = IntegrationSettings.from_environment()

        assert settings.persistence_configured
        assert settings.oracle_api_key == "gem"
        assert settings.maps_configured
        assert settings.oracle_timeout_seconds == 12.5
        assert settings.is_production

    def test_fallback_keys(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("API_KEY", "legacy")
        clean_env.setenv("SUPABASE_KEY", "service")

        settings = IntegrationSettings.from_environment()

        assert settings.oracle_api_key == "legacy"
        assert settings.supabase_key == "service"

    def test_blank_values_treated_as_missing(
        self, clean_env: pytest.MonkeyPatch
    ) -> None:
        clean_env.setenv("GEMINI_API_KEY", "   ")

        assert not IntegrationSettings.from_environment().oracle_configured

    def test_placeholder_url_selects_offline_mode(self) -> None:
        settings = IntegrationSettings(
            supabase_url="https://placeholder.supabase.co", supabase_key="anon"
        )

        assert not settings.persistence_configured

    def test_missing_key_selects_offline_mode(self) -> None:
        settings = IntegrationSettings(supabase_url="https://abc.supabase.co")

        assert not settings.persistence_configured


class TestLifecycleConfig:
    """Tests for LifecycleConfig validation."""

    def test_defaults(self) -> None:
        config = LifecycleConfig()

        assert config.confidence_threshold == 0.7
        assert config.default_credit_amount == 1.0

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"confidence_threshold": 1.2},
            {"default_credit_amount": 0.0},
            {"location_jitter": -0.1},
            {"regions": ()},
        ],
    )
    def test_invalid_values_rejected(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            LifecycleConfig(**kwargs)

    def test_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AI_CONFIDENCE_THRESHOLD", "0.9")
        monkeypatch.setenv("DEFAULT_CREDIT_AMOUNT", "not-a-number")

        config = LifecycleConfig.from_environment()

        assert config.confidence_threshold == 0.9
        assert config.default_credit_amount == 1.0


class TestOutboxConfig:
    """Tests for OutboxConfig validation."""

    def test_defaults(self) -> None:
        assert DEFAULT_OUTBOX_CONFIG.max_attempts == 5
        assert DEFAULT_OUTBOX_CONFIG.backoff_base_seconds == 2.0
        assert DEFAULT_OUTBOX_CONFIG.synced_retention == 200

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_attempts": 0},
            {"backoff_base_seconds": 0.0},
            {"backoff_base_seconds": 10.0, "backoff_max_seconds": 5.0},
            {"jitter_ratio": 1.5},
            {"drain_interval_seconds": 0.0},
            {"synced_retention": -1},
        ],
    )
    def test_invalid_values_rejected(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            OutboxConfig(**kwargs)

    def test_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OUTBOX_MAX_ATTEMPTS", "8")
        monkeypatch.setenv("OUTBOX_SYNCED_RETENTION", "25")

        config = OutboxConfig.from_environment()

        assert config.max_attempts == 8
        assert config.synced_retention == 25
