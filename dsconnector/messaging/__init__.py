"""Message layer: kind specs, the generic MessageService and per-kind services."""

from .base import MessageService
from .kinds import KIND_SPECS, MessageKindSpec, spec_for
from .services import (
    ArtifactRequestService,
    ContractAgreementService,
    ContractRequestService,
    DescriptionRequestService,
)

__all__ = [
    "MessageService", "MessageKindSpec", "KIND_SPECS", "spec_for",
    "ArtifactRequestService", "ContractAgreementService",
    "ContractRequestService", "DescriptionRequestService",
]
