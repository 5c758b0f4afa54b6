"""Bootstrap wiring for registry dependencies.

Selects the Supabase adapter when SUPABASE_URL and SUPABASE_ANON_KEY are
configured, otherwise runs offline (local-only). Every singleton can be
replaced with set_* and cleared with reset_registry_dependencies() in
tests.
"""

from __future__ import annotations

from structlog import get_logger

from bluecarbon.application.ports.remote_persistence import RemotePersistenceProtocol
from bluecarbon.application.ports.verification_oracle import (
    VerificationOracleProtocol,
)
from bluecarbon.application.services.content_hash_service import (
    Blake3ContentHashService,
)
from bluecarbon.application.services.lifecycle_controller import (
    SubmissionLifecycleController,
)
from bluecarbon.application.services.persistence_outbox import PersistenceOutbox
from bluecarbon.application.services.record_store import RecordStore
from bluecarbon.application.services.registry_sync_service import (
    RegistrySyncService,
)
from bluecarbon.application.services.role_views import RoleViewService
from bluecarbon.bootstrap.seed import seed_users
from bluecarbon.config.integrations_config import IntegrationSettings
from bluecarbon.config.lifecycle_config import LifecycleConfig
from bluecarbon.config.outbox_config import OutboxConfig
from bluecarbon.domain.services.authorization_policy import AuthorizationPolicy
from bluecarbon.infrastructure.adapters.oracle.gemini_oracle import (
    GeminiVerificationOracle,
)
from bluecarbon.infrastructure.monitoring.metrics import get_metrics_collector

logger = get_logger()

_UNSET = object()

_settings: IntegrationSettings | None = None
_lifecycle_config: LifecycleConfig | None = None
_outbox_config: OutboxConfig | None = None
_record_store: RecordStore | None = None
_remote_persistence: RemotePersistenceProtocol | None | object = _UNSET
_oracle: VerificationOracleProtocol | None = None
_outbox: PersistenceOutbox | None = None
_controller: SubmissionLifecycleController | None = None
_sync_service: RegistrySyncService | None = None
_role_views: RoleViewService | None = None
_policy: AuthorizationPolicy | None = None


def get_integration_settings() -> IntegrationSettings:
    """Get external integration settings."""
    global _settings
    if _settings is None:
        _settings = IntegrationSettings.from_environment()
    return _settings


def get_lifecycle_config() -> LifecycleConfig:
    """Get lifecycle configuration."""
    global _lifecycle_config
    if _lifecycle_config is None:
        _lifecycle_config = LifecycleConfig.from_environment()
    return _lifecycle_config


def get_outbox_config() -> OutboxConfig:
    """Get outbox retry configuration."""
    global _outbox_config
    if _outbox_config is None:
        _outbox_config = OutboxConfig.from_environment()
    return _outbox_config


def get_authorization_policy() -> AuthorizationPolicy:
    """Get the role authorization policy."""
    global _policy
    if _policy is None:
        _policy = AuthorizationPolicy()
    return _policy


def get_record_store() -> RecordStore:
    """Get the record store, seeded with one user per role."""
    global _record_store
    if _record_store is None:
        _record_store = RecordStore(users=seed_users())
    return _record_store


def get_remote_persistence() -> RemotePersistenceProtocol | None:
    """Get the hosted store adapter, or None in offline mode."""
    global _remote_persistence
    if _remote_persistence is _UNSET:
        settings = get_integration_settings()
        if not settings.persistence_configured:
            logger.warning(
                "remote_persistence_initialized",
                adapter_type="offline",
                message="SUPABASE_URL not set - records stay local to this process",
            )
            _remote_persistence = None
        else:
            try:
                from supabase import create_client

                from bluecarbon.infrastructure.adapters.persistence.supabase_persistence import (
                    SupabasePersistenceAdapter,
                )

                client = create_client(
                    settings.supabase_url or "", settings.supabase_key or ""
                )
                _remote_persistence = SupabasePersistenceAdapter(client)
                logger.info("remote_persistence_initialized", adapter_type="supabase")
            except Exception as e:
                logger.error(
                    "supabase_client_init_failed",
                    error=str(e),
                    message="Falling back to offline mode",
                )
                _remote_persistence = None
    return _remote_persistence  # type: ignore[return-value]


def get_verification_oracle() -> VerificationOracleProtocol:
    """Get the image verification oracle."""
    global _oracle
    if _oracle is None:
        settings = get_integration_settings()
        _oracle = GeminiVerificationOracle(
            api_key=settings.oracle_api_key,
            verify_model=settings.verify_model,
            qa_model=settings.qa_model,
            timeout_seconds=settings.oracle_timeout_seconds,
        )
        if not settings.oracle_configured:
            logger.warning(
                "oracle_initialized",
                configured=False,
                message="GEMINI_API_KEY not set - verdicts degrade to manual audit",
            )
    return _oracle


def get_persistence_outbox() -> PersistenceOutbox:
    """Get the persistence outbox."""
    global _outbox
    if _outbox is None:
        _outbox = PersistenceOutbox(
            remote=get_remote_persistence(),
            config=get_outbox_config(),
            metrics=get_metrics_collector(),
        )
    return _outbox


def get_lifecycle_controller() -> SubmissionLifecycleController:
    """Get the submission lifecycle controller."""
    global _controller
    if _controller is None:
        _controller = SubmissionLifecycleController(
            store=get_record_store(),
            oracle=get_verification_oracle(),
            outbox=get_persistence_outbox(),
            hash_service=Blake3ContentHashService(),
            policy=get_authorization_policy(),
            config=get_lifecycle_config(),
            metrics=get_metrics_collector(),
        )
    return _controller


def get_registry_sync_service() -> RegistrySyncService:
    """Get the registry sync service."""
    global _sync_service
    if _sync_service is None:
        _sync_service = RegistrySyncService(
            store=get_record_store(),
            outbox=get_persistence_outbox(),
            remote=get_remote_persistence(),
        )
    return _sync_service


def get_role_view_service() -> RoleViewService:
    """Get the role view service."""
    global _role_views
    if _role_views is None:
        _role_views = RoleViewService(get_record_store())
    return _role_views


def set_integration_settings(settings: IntegrationSettings) -> None:
    """Set custom integration settings for testing."""
    global _settings
    _settings = settings


def set_lifecycle_config(config: LifecycleConfig) -> None:
    """Set custom lifecycle config for testing."""
    global _lifecycle_config
    _lifecycle_config = config


def set_outbox_config(config: OutboxConfig) -> None:
    """Set custom outbox config for testing."""
    global _outbox_config
    _outbox_config = config


def set_remote_persistence(remote: RemotePersistenceProtocol | None) -> None:
    """Set the hosted store adapter (None for offline) for testing."""
    global _remote_persistence
    _remote_persistence = remote


def set_verification_oracle(oracle: VerificationOracleProtocol) -> None:
    """Set custom oracle for testing."""
    global _oracle
    _oracle = oracle


def reset_registry_dependencies() -> None:
    """Reset registry dependency singletons."""
    global _settings
    global _lifecycle_config
    global _outbox_config
    global _record_store
    global _remote_persistence
    global _oracle
    global _outbox
    global _controller
    global _sync_service
    global _role_views
    global _policy

    _settings = None
    _lifecycle_config = None
    _outbox_config = None
    _record_store = None
    _remote_persistence = _UNSET
    _oracle = None
    _outbox = None
    _controller = None
    _sync_service = None
    _role_views = None
    _policy = None
