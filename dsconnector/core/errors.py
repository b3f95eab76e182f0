"""
Unified exception hierarchy for the connector engine.

All exceptions inherit from DSConnectorError. Protocol-level failures
(transport, unexpected reply kind, agreement checks) and local failures
(persistence, lookups, configuration) each have their own type so callers
can tell a peer-side decision from a local problem.
"""

from __future__ import annotations

from typing import Any, Optional


class DSConnectorError(Exception):
    """Base exception for all connector errors."""
    pass


class InvalidDescriptor(DSConnectorError):
    """Outbound message descriptor is missing or incomplete (caller bug)."""
    pass


class MessageTransportError(DSConnectorError):
    """Sending a message or receiving its reply failed at the transport level."""

    def __init__(self, message: str, recipient: Optional[str] = None):
        super().__init__(message)
        self.recipient = recipient


class MessageResponseError(DSConnectorError):
    """A reply was received but its content could not be processed."""
    pass


class UnexpectedResponseKind(DSConnectorError):
    """
    The peer answered with a message kind other than the expected one.

    Explicit rejections end up here too. The raw response is kept for
    diagnostics; ``body`` is the reply payload and ``rejection_reason``
    is filled in when the peer sent one.
    """

    def __init__(
        self,
        expected: str,
        actual: Optional[str],
        response: Any = None,
        body: Any = None,
        rejection_reason: Optional[str] = None,
    ):
        detail = f"Expected {expected}, got {actual or 'no message type'}"
        if rejection_reason:
            detail += f" (reason: {rejection_reason})"
        super().__init__(detail)
        self.expected = expected
        self.actual = actual
        self.response = response
        self.body = body
        self.rejection_reason = rejection_reason


class MalformedAgreement(DSConnectorError):
    """The received contract agreement could not be parsed at all."""
    pass


class AgreementMismatch(DSConnectorError):
    """The received agreement does not match the original contract request."""

    def __init__(self, mismatches: list[str]):
        super().__init__("Contract agreement does not match request: " + "; ".join(mismatches))
        self.mismatches = list(mismatches)


class ResourceNotFound(DSConnectorError):
    """A local entity (agreement, artifact, resource) is unknown."""
    pass


class PersistenceError(DSConnectorError):
    """Storing an exchanged payload failed locally after a successful exchange."""
    pass


class ConfigError(DSConnectorError):
    """Configuration error (missing collaborator, invalid setting, etc.)."""
    pass
