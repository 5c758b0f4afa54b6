"""Application ports (interfaces) for the Blue Carbon registry.

Ports define the contracts the application layer depends on; adapters in
the infrastructure layer implement them.
"""

from bluecarbon.application.ports.content_hash_service import (
    ContentHashServiceProtocol,
)
from bluecarbon.application.ports.registry_metrics import RegistryMetricsProtocol
from bluecarbon.application.ports.remote_persistence import RemotePersistenceProtocol
from bluecarbon.application.ports.verification_oracle import (
    VerificationOracleProtocol,
)

__all__: list[str] = [
    "ContentHashServiceProtocol",
    "RegistryMetricsProtocol",
    "RemotePersistenceProtocol",
    "VerificationOracleProtocol",
]
