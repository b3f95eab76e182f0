"""Contract negotiation: models, agreement validation and the pipeline."""

from .manager import ContractManager
from .models import (
    AgreementRecord,
    ContractAgreement,
    ContractRequest,
    Rule,
    RuleType,
)
from .pipeline import NegotiationContext, NegotiationPipeline

__all__ = [
    "ContractManager",
    "AgreementRecord", "ContractAgreement", "ContractRequest", "Rule", "RuleType",
    "NegotiationContext", "NegotiationPipeline",
]
