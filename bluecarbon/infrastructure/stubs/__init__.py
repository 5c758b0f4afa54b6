"""In-memory stubs of the application ports for development and tests."""

from bluecarbon.infrastructure.stubs.remote_persistence_stub import (
    RemoteCall,
    RemotePersistenceStub,
)
from bluecarbon.infrastructure.stubs.verification_oracle_stub import (
    VerificationOracleStub,
)

__all__: list[str] = [
    "RemoteCall",
    "RemotePersistenceStub",
    "VerificationOracleStub",
]
