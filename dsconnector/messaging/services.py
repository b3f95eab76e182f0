"""
Per-kind message services.

Each class fixes the MessageKindSpec of the generic MessageService and adds a
``send_message`` shortcut that builds the descriptor and payload for the
usual call.
"""

from __future__ import annotations

from typing import Optional

from dsconnector.contracts.models import ContractAgreement, ContractRequest
from dsconnector.core.models import MessageDescriptor, MessageKind, Response
from dsconnector.core.protocols import IdentityProvider, MessageTransport

from . import kinds
from .base import MessageService

DEFAULT_DESCRIPTION_DEPTH = 10


class DescriptionRequestService(MessageService):
    """Requests the self-description of a remote element (catalog, resource, app)."""

    def __init__(
        self,
        identity: IdentityProvider,
        transport: MessageTransport,
        depth: int = DEFAULT_DESCRIPTION_DEPTH,
    ):
        super().__init__(
            kinds.DESCRIPTION_REQUEST, identity, transport,
            properties={"ids:depth": str(depth)},
        )

    async def send_message(self, recipient: str, element_id: str) -> Response:
        descriptor = MessageDescriptor(
            kind=MessageKind.DESCRIPTION_REQUEST,
            recipient=recipient,
            subject_id=element_id,
        )
        return await self.send_and_validate(descriptor, "")


class ArtifactRequestService(MessageService):
    """Requests artifact data, proving entitlement with a transfer contract."""

    def __init__(self, identity: IdentityProvider, transport: MessageTransport):
        super().__init__(kinds.ARTIFACT_REQUEST, identity, transport)

    async def send_message(
        self,
        recipient: str,
        artifact_id: str,
        transfer_contract: Optional[str] = None,
    ) -> Response:
        descriptor = MessageDescriptor(
            kind=MessageKind.ARTIFACT_REQUEST,
            recipient=recipient,
            subject_id=artifact_id,
            transfer_contract=transfer_contract,
        )
        return await self.send_and_validate(descriptor, "")


class ContractRequestService(MessageService):
    """Sends a contract request; a valid reply carries the provider's agreement."""

    def __init__(self, identity: IdentityProvider, transport: MessageTransport):
        super().__init__(kinds.CONTRACT_REQUEST, identity, transport)

    async def send_message(self, recipient: str, request: ContractRequest) -> Response:
        descriptor = MessageDescriptor(
            kind=MessageKind.CONTRACT_REQUEST,
            recipient=recipient,
            subject_id=request.id,
        )
        return await self.send_and_validate(descriptor, request.model_dump_json())


class ContractAgreementService(MessageService):
    """Sends the accepted agreement back to the provider as final confirmation."""

    def __init__(self, identity: IdentityProvider, transport: MessageTransport):
        super().__init__(kinds.CONTRACT_AGREEMENT, identity, transport)

    async def send_message(self, recipient: str, agreement: ContractAgreement) -> Response:
        descriptor = MessageDescriptor(
            kind=MessageKind.CONTRACT_AGREEMENT,
            recipient=recipient,
            subject_id=agreement.id,
        )
        return await self.send_and_validate(descriptor, agreement.model_dump_json())
