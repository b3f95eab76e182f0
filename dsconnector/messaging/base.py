"""
MessageService: one generic send-and-validate path for every message kind.

A service is parameterized by a MessageKindSpec. It builds the message
from a descriptor, hands header and payload to the transport, and checks
that the reply carries the kind the MessageKindSpec expects. Per-kind services only
add convenience entry points on top of this.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from dsconnector.core.errors import (
    InvalidDescriptor,
    MessageTransportError,
    UnexpectedResponseKind,
)
from dsconnector.core.models import (
    Message,
    MessageDescriptor,
    MessageKind,
    Payload,
    Response,
    generate_message_id,
    utc_now,
)
from dsconnector.core.protocols import IdentityProvider, MessageTransport

from .kinds import MessageKindSpec, spec_for

logger = logging.getLogger(__name__)


class MessageService:
    """
    Generic message service for a single outbound kind.

    Holds only configuration (MessageKindSpec, identity provider, transport,
    static properties). No state is kept between calls.
    """

    def __init__(
        self,
        kind_spec: MessageKindSpec,
        identity: IdentityProvider,
        transport: MessageTransport,
        properties: Optional[dict[str, str]] = None,
    ):
        self._spec = kind_spec
        self._identity = identity
        self._transport = transport
        self._properties = dict(properties or {})

    @classmethod
    def for_kind(
        cls,
        kind: MessageKind,
        identity: IdentityProvider,
        transport: MessageTransport,
        properties: Optional[dict[str, str]] = None,
    ) -> MessageService:
        return cls(spec_for(kind), identity, transport, properties)

    @property
    def kind(self) -> MessageKind:
        return self._spec.kind

    @property
    def expected_response(self) -> MessageKind:
        return self._spec.expected_response

    # ============ Build ============

    def build_message(self, descriptor: Optional[MessageDescriptor]) -> Message:
        """
        Build the outbound message for ``descriptor``.

        Reads the current identity and token from the identity provider
        on every call.

        Raises InvalidDescriptor if the descriptor is missing, of another
        kind, or lacks a field this kind requires.
        """
        if descriptor is None:
            raise InvalidDescriptor("Message descriptor must not be None")
        if descriptor.kind != self._spec.kind:
            raise InvalidDescriptor(
                f"Descriptor kind {descriptor.kind.value} does not match "
                f"service kind {self._spec.kind.value}"
            )
        missing = [f for f in self._spec.required_fields if not getattr(descriptor, f)]
        if missing:
            raise InvalidDescriptor(
                f"{self._spec.kind.value} requires {', '.join(missing)}"
            )

        identity = self._identity.current_identity()

        fields: dict[str, Optional[str]] = {}
        if descriptor.transfer_contract:
            fields["transfer_contract"] = descriptor.transfer_contract
        if self._spec.subject_field and descriptor.subject_id:
            fields[self._spec.subject_field] = descriptor.subject_id

        properties = {
            **self._spec.default_properties,
            **self._properties,
            **descriptor.properties,
        }

        return Message(
            kind=self._spec.kind,
            id=generate_message_id(self._spec.kind),
            issued=utc_now(),
            model_version=identity.outbound_model_version,
            issuer_connector=identity.connector_id,
            sender_agent=identity.connector_id,
            security_token=identity.security_token,
            recipient_connector=(descriptor.recipient,),
            properties=properties,
            **fields,
        )

    # ============ Send ============

    async def send(self, descriptor: MessageDescriptor, payload: Payload = "") -> Response:
        """
        Build the message and send it with ``payload`` to the descriptor's recipient.

        Returns the raw reply without looking at its kind.
        Raises MessageTransportError on any transport failure.
        """
        message = self.build_message(descriptor)
        recipient = descriptor.recipient

        logger.info("Message SEND | %s | recipient=%s", self._spec.kind.value, recipient)
        t0 = time.monotonic()
        try:
            response = await self._transport.send(recipient, message.to_header(), payload)
        except MessageTransportError as e:
            elapsed_ms = (time.monotonic() - t0) * 1000
            logger.error("Message FAIL | %s | recipient=%s | %.0fms | %s",
                         self._spec.kind.value, recipient, elapsed_ms, e)
            raise
        except Exception as e:
            elapsed_ms = (time.monotonic() - t0) * 1000
            logger.error("Message FAIL | %s | recipient=%s | %.0fms | %s",
                         self._spec.kind.value, recipient, elapsed_ms, e)
            raise MessageTransportError(
                f"Sending {self._spec.kind.value} failed: {e}", recipient=recipient,
            ) from e

        elapsed_ms = (time.monotonic() - t0) * 1000
        logger.info("Message OK   | %s | recipient=%s | %.0fms | reply=%s",
                    self._spec.kind.value, recipient, elapsed_ms, response.kind)
        return response

    def validate_response(self, response: Response) -> bool:
        """True if the reply declares the kind this service expects."""
        return response.kind == self._spec.expected_response.value

    async def send_and_validate(
        self, descriptor: MessageDescriptor, payload: Payload = "",
    ) -> Response:
        """
        Send, then check the reply kind.

        Raises UnexpectedResponseKind (carrying the raw reply) if the peer
        answered with any other kind, including a rejection.
        """
        response = await self.send(descriptor, payload)
        if not self.validate_response(response):
            if response.kind == MessageKind.REJECTION.value:
                logger.warning("Message REJECTED | %s | recipient=%s | reason=%s",
                               self._spec.kind.value, descriptor.recipient,
                               response.rejection_reason)
            else:
                logger.warning("Message UNEXPECTED | %s | recipient=%s | expected=%s | got=%s",
                               self._spec.kind.value, descriptor.recipient,
                               self._spec.expected_response.value, response.kind)
            raise UnexpectedResponseKind(
                expected=self._spec.expected_response.value,
                actual=response.kind,
                response=response,
                body=response.payload,
                rejection_reason=response.rejection_reason,
            )
        return response
