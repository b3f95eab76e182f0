"""
dsconnector: negotiation-and-retrieval engine for a peer-to-peer
data-exchange connector.

Public API surface. Import everything you need from here::

    from dsconnector import ConnectorBuilder, ContractRequest, Rule

Extension points (implement these Protocols to customize):

- ``IdentityProvider``: connector id, model version and security token
- ``MessageTransport``: how messages reach a peer
- ``EntityPersistenceService``: where downloaded payloads go
- ``AgreementService`` / ``AgreementStore``: agreement lookup and storage
"""

# -- Engine --
from dsconnector.core.engine import ConnectorEngine

# -- Data models --
from dsconnector.core.models import (
    ConnectorIdentity,
    Message,
    MessageDescriptor,
    MessageKind,
    Response,
)
from dsconnector.contracts.models import (
    AgreementRecord,
    ContractAgreement,
    ContractRequest,
    Rule,
    RuleType,
)

# -- Errors --
from dsconnector.core.errors import (
    AgreementMismatch,
    ConfigError,
    DSConnectorError,
    InvalidDescriptor,
    MalformedAgreement,
    MessageResponseError,
    MessageTransportError,
    PersistenceError,
    ResourceNotFound,
    UnexpectedResponseKind,
)

# -- Protocols --
from dsconnector.core.protocols import (
    AgreementService,
    AgreementStore,
    EntityPersistenceService,
    IdentityProvider,
    MessageTransport,
)

# -- Services and components --
from dsconnector.contracts.manager import ContractManager
from dsconnector.contracts.pipeline import NegotiationContext, NegotiationPipeline
from dsconnector.download import (
    ArtifactDataDownloader,
    ArtifactDownloadResult,
    ArtifactFailurePolicy,
    MetadataDownloader,
)
from dsconnector.messaging import (
    ArtifactRequestService,
    ContractAgreementService,
    ContractRequestService,
    DescriptionRequestService,
    MessageService,
)

# -- Builder + defaults --
from dsconnector.builder import ConnectorBuilder
from dsconnector.infra import (
    ConnectorConfig,
    HttpMessageTransport,
    InMemoryAgreementService,
    InMemoryPersistence,
    StaticIdentityProvider,
)

__version__ = "0.1.0"

__all__ = [
    # Engine
    "ConnectorEngine",
    "ConnectorBuilder",
    # Models
    "ConnectorIdentity",
    "Message",
    "MessageDescriptor",
    "MessageKind",
    "Response",
    "AgreementRecord",
    "ContractAgreement",
    "ContractRequest",
    "Rule",
    "RuleType",
    # Errors
    "DSConnectorError",
    "AgreementMismatch",
    "ConfigError",
    "InvalidDescriptor",
    "MalformedAgreement",
    "MessageResponseError",
    "MessageTransportError",
    "PersistenceError",
    "ResourceNotFound",
    "UnexpectedResponseKind",
    # Protocols
    "AgreementService",
    "AgreementStore",
    "EntityPersistenceService",
    "IdentityProvider",
    "MessageTransport",
    # Components
    "ContractManager",
    "NegotiationContext",
    "NegotiationPipeline",
    "ArtifactDataDownloader",
    "ArtifactDownloadResult",
    "ArtifactFailurePolicy",
    "MetadataDownloader",
    "ArtifactRequestService",
    "ContractAgreementService",
    "ContractRequestService",
    "DescriptionRequestService",
    "MessageService",
    # Defaults
    "ConnectorConfig",
    "HttpMessageTransport",
    "InMemoryAgreementService",
    "InMemoryPersistence",
    "StaticIdentityProvider",
]
