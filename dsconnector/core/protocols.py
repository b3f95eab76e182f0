"""
Module-boundary Protocol definitions: the contracts between the engine
and its collaborators.

These Protocols define WHAT each collaborator must do, not HOW.
Any implementation that satisfies the Protocol can be plugged into
the engine; defaults for headless use live in ``dsconnector.infra``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from .models import ConnectorIdentity, Payload, Response

if TYPE_CHECKING:
    from dsconnector.contracts.models import AgreementRecord, ContractAgreement


# ============ Identity ============

@runtime_checkable
class IdentityProvider(Protocol):
    """
    Supplies this connector's identity and current security token.

    Called on every message build. Token freshness is the provider's
    concern; the engine never caches what it returns.
    """

    def current_identity(self) -> ConnectorIdentity:
        ...


# ============ Transport ============

@runtime_checkable
class MessageTransport(Protocol):
    """
    Sends one message header plus payload to a recipient and returns
    the multipart reply.

    Implementations raise MessageTransportError for unreachable peers,
    timeouts and malformed multipart framing. Timeouts are the
    transport's concern; the engine has none of its own.
    """

    async def send(
        self,
        recipient: str,
        header: dict[str, str],
        payload: Payload,
    ) -> Response:
        ...


# ============ Persistence ============

@runtime_checkable
class EntityPersistenceService(Protocol):
    """
    Durably stores what the downloaders retrieve.

    Each method may raise ResourceNotFound, MessageResponseError or
    OSError; the downloaders decide how those propagate.
    """

    async def save_metadata(
        self,
        response: Response,
        artifacts: list[str],
        auto_download: bool,
        recipient: str,
    ) -> None:
        """Store a description response; the service decides which artifacts to materialize."""
        ...

    async def save_data(self, response: Response, artifact_id: str) -> None:
        ...

    async def save_app_data(self, response: Response, app_id: str) -> None:
        ...

    async def save_app_resource(self, response: Response, recipient: str) -> None:
        ...


# ============ Agreements ============

@runtime_checkable
class AgreementService(Protocol):
    """Looks up locally known agreements. Raises ResourceNotFound for unknown ids."""

    def get(self, agreement_id: str) -> AgreementRecord:
        ...


@runtime_checkable
class AgreementStore(Protocol):
    """Optional capability: accept a freshly negotiated agreement."""

    def store(self, agreement: ContractAgreement) -> AgreementRecord:
        ...
