"""
Message kind capability records.

Each outbound kind is described by one MessageKindSpec: which descriptor
fields it needs, where the descriptor's subject goes in the message, and
which reply kind counts as success. The generic MessageService reads
these records; nothing else differs between kinds.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from dsconnector.core.models import MessageKind


@dataclass(frozen=True)
class MessageKindSpec:
    kind: MessageKind
    expected_response: MessageKind
    required_fields: tuple[str, ...] = ()
    # Message attribute the descriptor's subject_id is written to
    subject_field: Optional[str] = None
    default_properties: dict[str, str] = field(default_factory=dict)


DESCRIPTION_REQUEST = MessageKindSpec(
    kind=MessageKind.DESCRIPTION_REQUEST,
    expected_response=MessageKind.DESCRIPTION_RESPONSE,
    required_fields=("recipient", "subject_id"),
    subject_field="requested_element",
)

ARTIFACT_REQUEST = MessageKindSpec(
    kind=MessageKind.ARTIFACT_REQUEST,
    expected_response=MessageKind.ARTIFACT_RESPONSE,
    required_fields=("recipient", "subject_id"),
    subject_field="requested_artifact",
)

CONTRACT_REQUEST = MessageKindSpec(
    kind=MessageKind.CONTRACT_REQUEST,
    expected_response=MessageKind.CONTRACT_AGREEMENT,
    required_fields=("recipient", "subject_id"),
    subject_field="requested_element",
)

CONTRACT_AGREEMENT = MessageKindSpec(
    kind=MessageKind.CONTRACT_AGREEMENT,
    expected_response=MessageKind.MESSAGE_PROCESSED,
    required_fields=("recipient", "subject_id"),
    subject_field="transfer_contract",
)

KIND_SPECS: dict[MessageKind, MessageKindSpec] = {
    spec.kind: spec
    for spec in (DESCRIPTION_REQUEST, ARTIFACT_REQUEST, CONTRACT_REQUEST, CONTRACT_AGREEMENT)
}


def spec_for(kind: MessageKind) -> MessageKindSpec:
    """Look up the MessageKindSpec for an outbound kind. Raises KeyError for reply-only kinds."""
    return KIND_SPECS[kind]
