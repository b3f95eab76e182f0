"""
ConnectorEngine: the explicitly-owned object that ties identity,
transport and collaborators to the message services, the negotiation
pipeline and the downloaders.

The engine holds configuration only. Every call builds its own
descriptors and contexts, so independent negotiations and downloads can
run as concurrent tasks against one engine without locking.
"""

from __future__ import annotations

import logging
from typing import Optional

from dsconnector.contracts.manager import ContractManager
from dsconnector.contracts.models import ContractAgreement, ContractRequest
from dsconnector.contracts.pipeline import NegotiationPipeline
from dsconnector.download.artifacts import (
    ArtifactDataDownloader,
    ArtifactDownloadResult,
    ArtifactFailurePolicy,
)
from dsconnector.download.metadata import MetadataDownloader
from dsconnector.messaging.services import (
    DEFAULT_DESCRIPTION_DEPTH,
    ArtifactRequestService,
    ContractAgreementService,
    ContractRequestService,
    DescriptionRequestService,
)

from .protocols import (
    AgreementService,
    AgreementStore,
    EntityPersistenceService,
    IdentityProvider,
    MessageTransport,
)

logger = logging.getLogger(__name__)


class ConnectorEngine:
    """
    Negotiation-and-retrieval engine for one connector.

    Entry points (close with aclose() or use as an async context manager):
    - negotiate(): contract request -> validated agreement
    - download_metadata() / download_app_resource(): descriptions
    - download_artifacts() / download_app_artifact(): binaries
    """

    def __init__(
        self,
        identity: IdentityProvider,
        transport: MessageTransport,
        persistence: EntityPersistenceService,
        agreements: AgreementService,
        description_depth: int = DEFAULT_DESCRIPTION_DEPTH,
        failure_policy: ArtifactFailurePolicy = ArtifactFailurePolicy.ABORT,
        confirm_agreements: bool = False,
        contract_manager: Optional[ContractManager] = None,
    ):
        self._identity = identity
        self._transport = transport
        self._persistence = persistence
        self._agreements = agreements

        self.description_service = DescriptionRequestService(
            identity, transport, depth=description_depth,
        )
        self.artifact_service = ArtifactRequestService(identity, transport)
        self.contract_request_service = ContractRequestService(identity, transport)
        self.contract_agreement_service = ContractAgreementService(identity, transport)

        self.contract_manager = contract_manager or ContractManager()
        self.pipeline = NegotiationPipeline.default(
            self.contract_request_service,
            self.contract_manager,
            self.contract_agreement_service if confirm_agreements else None,
        )
        self.metadata_downloader = MetadataDownloader(self.description_service, persistence)
        self.artifact_downloader = ArtifactDataDownloader(
            self.artifact_service, agreements, persistence, failure_policy,
        )

    # ============ Lifecycle ============

    async def aclose(self) -> None:
        """Release the transport's connections, if it holds any."""
        aclose = getattr(self._transport, "aclose", None)
        if aclose is not None:
            await aclose()
            logger.debug("Closed transport %s", type(self._transport).__name__)

    async def __aenter__(self) -> ConnectorEngine:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ============ Negotiation ============

    async def negotiate(self, recipient: str, request: ContractRequest) -> ContractAgreement:
        """
        Run one contract negotiation with ``recipient``.

        All-or-nothing: any failure (transport, rejection, malformed or
        mismatching agreement) is raised. When the agreement collaborator
        can store agreements, the validated agreement is handed to it.
        """
        ctx = await self.pipeline.run(recipient, request)
        agreement = ctx.agreement
        if isinstance(self._agreements, AgreementStore):
            self._agreements.store(agreement)
        else:
            logger.debug("Agreement collaborator cannot store; leaving %s to the caller",
                         agreement.id)
        return agreement

    # ============ Downloads ============

    async def download_metadata(
        self,
        recipient: str,
        resources: list[str],
        artifacts: Optional[list[str]] = None,
        auto_download: bool = False,
    ) -> None:
        await self.metadata_downloader.download(
            recipient, resources, artifacts or [], auto_download,
        )

    async def download_app_resource(self, recipient: str, app_resource_id: str) -> None:
        await self.metadata_downloader.download_app_resource(recipient, app_resource_id)

    async def download_artifacts(
        self,
        recipient: str,
        artifacts: list[str],
        agreement_id: str,
    ) -> list[ArtifactDownloadResult]:
        return await self.artifact_downloader.download(recipient, artifacts, agreement_id)

    async def download_app_artifact(self, recipient: str, app_artifact_id: str) -> None:
        await self.artifact_downloader.download_app_artifact(recipient, app_artifact_id)
