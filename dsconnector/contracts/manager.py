"""
ContractManager: compares a received agreement to the original request.

The provider is free to assign new ids to the agreement and its rules,
but parties, rule content and validity window must match what the
consumer asked for. Any mismatch is fatal to the negotiation attempt.
"""

from __future__ import annotations

import logging
from typing import Union

from pydantic import ValidationError

from dsconnector.core.errors import AgreementMismatch, MalformedAgreement

from .models import ContractAgreement, ContractRequest, as_utc

logger = logging.getLogger(__name__)


class ContractManager:
    """Validates contract agreements against contract requests."""

    def parse_agreement(self, raw_agreement: Union[str, bytes]) -> ContractAgreement:
        """Parse a JSON agreement body. Raises MalformedAgreement."""
        if raw_agreement is None or not raw_agreement.strip():
            raise MalformedAgreement("Contract agreement body is empty")
        try:
            return ContractAgreement.model_validate_json(raw_agreement)
        except ValidationError as e:
            logger.warning("Could not parse contract agreement: %s", e)
            raise MalformedAgreement(f"Invalid contract agreement: {e}") from e

    def compare(self, agreement: ContractAgreement, request: ContractRequest) -> list[str]:
        """Return a description of every check the agreement fails."""
        mismatches: list[str] = []

        if agreement.consumer != request.consumer:
            mismatches.append(
                f"consumer differs (requested {request.consumer}, got {agreement.consumer})"
            )
        if agreement.provider != request.provider:
            mismatches.append(
                f"provider differs (requested {request.provider}, got {agreement.provider})"
            )

        requested_rules = request.rule_set()
        agreed_rules = agreement.rule_set()
        if agreed_rules != requested_rules:
            missing = len(requested_rules - agreed_rules)
            extra = len(agreed_rules - requested_rules)
            mismatches.append(f"rules differ ({missing} missing, {extra} unexpected)")

        # Absent bounds on the agreement side are not checked.
        agreed_start, requested_start = as_utc(agreement.start), as_utc(request.start)
        agreed_end, requested_end = as_utc(agreement.end), as_utc(request.end)
        if agreed_start is not None and requested_start is not None:
            if agreed_start < requested_start:
                mismatches.append("agreement starts before requested start")
        if agreed_end is not None and requested_end is not None:
            if agreed_end > requested_end:
                mismatches.append("agreement ends after requested end")

        return mismatches

    def validate_contract_agreement(
        self,
        raw_agreement: Union[str, bytes],
        original_request: ContractRequest,
    ) -> ContractAgreement:
        """
        Parse ``raw_agreement`` and check it against ``original_request``.

        Returns the parsed agreement; the caller persists it.

        Raises:
            MalformedAgreement: body is not a valid agreement.
            AgreementMismatch: parties, rules or validity window differ.
        """
        agreement = self.parse_agreement(raw_agreement)
        mismatches = self.compare(agreement, original_request)
        if mismatches:
            for m in mismatches:
                logger.warning("Agreement %s rejected: %s", agreement.id, m)
            raise AgreementMismatch(mismatches)

        logger.info("Agreement %s matches request %s", agreement.id, original_request.id)
        return agreement
