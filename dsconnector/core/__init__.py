"""Core layer: models, errors and collaborator protocols."""

from .errors import (
    DSConnectorError,
    AgreementMismatch,
    ConfigError,
    InvalidDescriptor,
    MalformedAgreement,
    MessageResponseError,
    MessageTransportError,
    PersistenceError,
    ResourceNotFound,
    UnexpectedResponseKind,
)
from .models import (
    ConnectorIdentity,
    Message,
    MessageDescriptor,
    MessageKind,
    Payload,
    Response,
    generate_id,
    generate_message_id,
)
from .protocols import (
    AgreementService,
    AgreementStore,
    EntityPersistenceService,
    IdentityProvider,
    MessageTransport,
)

__all__ = [
    "DSConnectorError", "AgreementMismatch", "ConfigError", "InvalidDescriptor",
    "MalformedAgreement", "MessageResponseError", "MessageTransportError",
    "PersistenceError", "ResourceNotFound", "UnexpectedResponseKind",
    "ConnectorIdentity", "Message", "MessageDescriptor", "MessageKind",
    "Payload", "Response", "generate_id", "generate_message_id",
    "AgreementService", "AgreementStore", "EntityPersistenceService",
    "IdentityProvider", "MessageTransport",
]
