"""
Pydantic models for contract requests, agreements and their rules.

Contract bodies travel as JSON payloads of contract messages; these
models are both the parser for incoming agreements and the serializer
for outgoing requests.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive timestamps as UTC so windows can always be compared."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class RuleType(str, Enum):
    PERMISSION = "permission"
    PROHIBITION = "prohibition"
    OBLIGATION = "obligation"


class Rule(BaseModel):
    """A single usage rule. ``id`` is identity only and not part of the content."""

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    type: RuleType = RuleType.PERMISSION
    action: str
    target: Optional[str] = None
    constraints: list[str] = Field(default_factory=list)

    def content_key(self) -> tuple:
        return (self.type, self.action, self.target, frozenset(self.constraints))


class ContractBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    consumer: str
    provider: str
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    rules: list[Rule] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_window(self) -> ContractBase:
        start, end = as_utc(self.start), as_utc(self.end)
        if start is not None and end is not None and end < start:
            raise ValueError("contract end lies before contract start")
        return self

    def rule_set(self) -> frozenset:
        """Rules as an order-insensitive set of content keys."""
        return frozenset(rule.content_key() for rule in self.rules)


class ContractRequest(ContractBase):
    """What the consumer asks the provider to agree to."""
    pass


class ContractAgreement(ContractBase):
    """What the provider returned as the binding contract."""
    pass


@dataclass(frozen=True)
class AgreementRecord:
    """A locally known agreement, as handed out by the agreement collaborator."""
    agreement_id: str
    remote_id: str
    agreement: Optional[ContractAgreement] = None
