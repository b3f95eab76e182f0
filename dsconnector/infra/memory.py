"""
In-memory collaborators for headless use (scripts, notebooks, CI).

- InMemoryPersistence: keeps every saved response in dicts
- InMemoryAgreementService: agreement lookup + store, keyed by local id
"""

from __future__ import annotations

import logging
from typing import Optional

from dsconnector.contracts.models import AgreementRecord, ContractAgreement
from dsconnector.core.errors import MessageResponseError, ResourceNotFound
from dsconnector.core.models import Response, generate_id

logger = logging.getLogger(__name__)


class InMemoryPersistence:
    """EntityPersistenceService that stores responses in memory."""

    def __init__(self) -> None:
        self.metadata: dict[str, list[dict]] = {}
        self.data: dict[str, bytes] = {}
        self.app_data: dict[str, bytes] = {}
        self.app_resources: dict[str, list[Response]] = {}

    async def save_metadata(
        self,
        response: Response,
        artifacts: list[str],
        auto_download: bool,
        recipient: str,
    ) -> None:
        self.metadata.setdefault(recipient, []).append({
            "response": response,
            "artifacts": list(artifacts),
            "auto_download": auto_download,
        })
        logger.debug("Stored metadata from %s (%d artifacts)", recipient, len(artifacts))

    async def save_data(self, response: Response, artifact_id: str) -> None:
        self.data[artifact_id] = self._require_payload(response, artifact_id)

    async def save_app_data(self, response: Response, app_id: str) -> None:
        self.app_data[app_id] = self._require_payload(response, app_id)

    async def save_app_resource(self, response: Response, recipient: str) -> None:
        self.app_resources.setdefault(recipient, []).append(response)

    @staticmethod
    def _require_payload(response: Response, subject: str) -> bytes:
        data = response.payload_bytes()
        if not data:
            raise MessageResponseError(f"Response for {subject} carries no payload")
        return data


class InMemoryAgreementService:
    """AgreementService + AgreementStore backed by a dict."""

    def __init__(self, records: Optional[list[AgreementRecord]] = None):
        self._records: dict[str, AgreementRecord] = {
            r.agreement_id: r for r in (records or [])
        }

    def get(self, agreement_id: str) -> AgreementRecord:
        record = self._records.get(agreement_id)
        if record is None:
            raise ResourceNotFound(f"Agreement {agreement_id} is unknown")
        return record

    def store(self, agreement: ContractAgreement) -> AgreementRecord:
        record = AgreementRecord(
            agreement_id=generate_id("agr"),
            remote_id=agreement.id,
            agreement=agreement,
        )
        self._records[record.agreement_id] = record
        logger.info("Stored agreement %s as %s", agreement.id, record.agreement_id)
        return record

    def list_all(self) -> list[AgreementRecord]:
        return list(self._records.values())
