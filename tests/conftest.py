"""
Pytest configuration and shared fixtures for Blue Carbon registry tests.

Testing Standards:
- Async tests are marked with pytest.mark.asyncio (auto mode enabled in pyproject.toml)
- Use AsyncMock for async function mocking
- Unit tests go in tests/unit/
- Integration tests go in tests/integration/
"""

import random

import pytest

from bluecarbon.application.services.content_hash_service import (
    Blake3ContentHashService,
)
from bluecarbon.application.services.lifecycle_controller import (
    SubmissionLifecycleController,
)
from bluecarbon.application.services.persistence_outbox import PersistenceOutbox
from bluecarbon.application.services.record_store import RecordStore
from bluecarbon.bootstrap.seed import (
    SEED_ADMIN_ID,
    SEED_CORPORATE_ID,
    SEED_FISHERMAN_ID,
    SEED_NGO_ID,
    seed_users,
)
from bluecarbon.config.outbox_config import TEST_OUTBOX_CONFIG
from bluecarbon.domain.models.user import User
from bluecarbon.infrastructure.monitoring.metrics import MetricsCollector
from bluecarbon.infrastructure.stubs import (
    RemotePersistenceStub,
    VerificationOracleStub,
)
from tests.helpers import FakeClock


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from bluecarbon import __version__

    return __version__


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> RecordStore:
    """Record store seeded with one user per role."""
    return RecordStore(users=seed_users())


@pytest.fixture
def fisherman(store: RecordStore) -> User:
    return store.get_user(SEED_FISHERMAN_ID)


@pytest.fixture
def ngo(store: RecordStore) -> User:
    return store.get_user(SEED_NGO_ID)


@pytest.fixture
def admin(store: RecordStore) -> User:
    return store.get_user(SEED_ADMIN_ID)


@pytest.fixture
def corporate(store: RecordStore) -> User:
    return store.get_user(SEED_CORPORATE_ID)


@pytest.fixture
def oracle() -> VerificationOracleStub:
    return VerificationOracleStub()


@pytest.fixture
def remote() -> RemotePersistenceStub:
    return RemotePersistenceStub()


@pytest.fixture
def metrics() -> MetricsCollector:
    """Metrics collector on its own registry."""
    return MetricsCollector()


@pytest.fixture
def outbox(
    remote: RemotePersistenceStub, metrics: MetricsCollector, clock: FakeClock
) -> PersistenceOutbox:
    return PersistenceOutbox(
        remote,
        config=TEST_OUTBOX_CONFIG,
        metrics=metrics,
        rng=random.Random(7),
        clock=clock,
    )


@pytest.fixture
def controller(
    store: RecordStore,
    oracle: VerificationOracleStub,
    outbox: PersistenceOutbox,
    metrics: MetricsCollector,
    clock: FakeClock,
) -> SubmissionLifecycleController:
    return SubmissionLifecycleController(
        store=store,
        oracle=oracle,
        outbox=outbox,
        hash_service=Blake3ContentHashService(),
        metrics=metrics,
        rng=random.Random(42),
        clock=clock,
    )
