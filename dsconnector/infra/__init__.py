from .config import ConnectorConfig
from .identity import StaticIdentityProvider
from .memory import InMemoryAgreementService, InMemoryPersistence
from .transport import HttpMessageTransport

__all__ = [
    "ConnectorConfig", "StaticIdentityProvider",
    "InMemoryAgreementService", "InMemoryPersistence", "HttpMessageTransport",
]
