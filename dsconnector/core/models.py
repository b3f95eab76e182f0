"""
Core data models for the connector engine.

These are the value objects shared across all modules: what a message
looks like before and after it is built, and what a reply looks like.
They define WHAT the engine works with, not HOW it processes them.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union


# ============ ID Generation ============

MESSAGE_ID_BASE = "https://w3id.org/idsa/autogen"


def generate_id(prefix: str = "") -> str:
    """Generate a unique ID with optional prefix."""
    uid = uuid.uuid4().hex[:12]
    return f"{prefix}_{uid}" if prefix else uid


def generate_message_id(kind: MessageKind) -> str:
    """Generate a message URI under the autogen namespace for the given kind."""
    return f"{MESSAGE_ID_BASE}/{kind.local_name}/{uuid.uuid4()}"


# ============ Message Kinds ============

class MessageKind(str, Enum):
    """Kind tags carried in the ``@type`` header field of every message."""
    DESCRIPTION_REQUEST = "ids:DescriptionRequestMessage"
    DESCRIPTION_RESPONSE = "ids:DescriptionResponseMessage"
    ARTIFACT_REQUEST = "ids:ArtifactRequestMessage"
    ARTIFACT_RESPONSE = "ids:ArtifactResponseMessage"
    CONTRACT_REQUEST = "ids:ContractRequestMessage"
    CONTRACT_AGREEMENT = "ids:ContractAgreementMessage"
    MESSAGE_PROCESSED = "ids:MessageProcessedNotificationMessage"
    REJECTION = "ids:RejectionMessage"

    @property
    def local_name(self) -> str:
        """Kind name without the ``ids:`` prefix, e.g. ``artifactRequestMessage``."""
        name = self.value.split(":", 1)[-1]
        return name[0].lower() + name[1:]


# ============ Connector Identity ============

@dataclass(frozen=True)
class ConnectorIdentity:
    """
    Snapshot of this connector's identity at message-build time.

    Handed out by an IdentityProvider on every build; never cached by
    the message services.
    """
    connector_id: str
    outbound_model_version: str
    security_token: str

    def __repr__(self) -> str:
        # Keep tokens out of logs and tracebacks.
        return (
            f"ConnectorIdentity(connector_id={self.connector_id!r}, "
            f"outbound_model_version={self.outbound_model_version!r}, security_token=***)"
        )


# ============ Outbound ============

@dataclass(frozen=True)
class MessageDescriptor:
    """
    Input from which one outbound message is built.

    ``subject_id`` is the requested element (description requests),
    requested artifact (artifact requests) or contract id (contract
    messages). ``transfer_contract`` is the agreement proving entitlement
    for artifact requests.
    """
    kind: MessageKind
    recipient: str
    subject_id: Optional[str] = None
    transfer_contract: Optional[str] = None
    properties: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Message:
    """A fully-formed outbound message, ready to hand to a transport."""
    kind: MessageKind
    id: str
    issued: datetime
    model_version: str
    issuer_connector: str
    sender_agent: str
    security_token: str
    recipient_connector: tuple[str, ...]
    requested_element: Optional[str] = None
    requested_artifact: Optional[str] = None
    transfer_contract: Optional[str] = None
    properties: dict[str, str] = field(default_factory=dict)

    def to_header(self) -> dict[str, str]:
        """Flatten the message into ordered header fields."""
        header: dict[str, str] = {
            "@type": self.kind.value,
            "@id": self.id,
            "ids:issued": self.issued.isoformat(),
            "ids:modelVersion": self.model_version,
            "ids:issuerConnector": self.issuer_connector,
            "ids:senderAgent": self.sender_agent,
            "ids:securityToken": self.security_token,
            "ids:recipientConnector": ",".join(self.recipient_connector),
        }
        if self.requested_element is not None:
            header["ids:requestedElement"] = self.requested_element
        if self.requested_artifact is not None:
            header["ids:requestedArtifact"] = self.requested_artifact
        if self.transfer_contract is not None:
            header["ids:transferContract"] = self.transfer_contract
        header.update(self.properties)
        return header


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ============ Inbound ============

Payload = Union[bytes, str]


@dataclass(frozen=True)
class Response:
    """
    One multipart reply: message header fields plus the opaque payload.

    Owned by the call that produced it and discarded after the
    validation/persistence step consumed it.
    """
    header: dict[str, str]
    payload: Payload = ""

    @property
    def kind(self) -> Optional[str]:
        """The declared message kind (``@type``), if any."""
        return self.header.get("@type")

    @property
    def rejection_reason(self) -> Optional[str]:
        return self.header.get("ids:rejectionReason")

    def payload_text(self, encoding: str = "utf-8") -> str:
        """Payload as text, decoding bytes if necessary."""
        if isinstance(self.payload, bytes):
            return self.payload.decode(encoding)
        return self.payload

    def payload_bytes(self, encoding: str = "utf-8") -> bytes:
        if isinstance(self.payload, str):
            return self.payload.encode(encoding)
        return self.payload
