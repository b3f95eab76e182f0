"""
ArtifactDataDownloader: fetches artifact data under an agreement.

Artifacts are requested in order, one exchange at a time. Protocol
failures always abort. What happens after a persistence failure is set
by ArtifactFailurePolicy:

- ABORT (default): log that the artifact may be retried later, then raise
  PersistenceError; remaining artifacts are not requested.
- CONTINUE: log, record the failure on that artifact's result and go on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from dsconnector.core.errors import PersistenceError
from dsconnector.core.protocols import AgreementService, EntityPersistenceService
from dsconnector.messaging.services import ArtifactRequestService

from .metadata import PERSISTENCE_FAILURES

logger = logging.getLogger(__name__)


class ArtifactFailurePolicy(str, Enum):
    ABORT = "abort"
    CONTINUE = "continue"


@dataclass(frozen=True)
class ArtifactDownloadResult:
    """Outcome for one artifact of a download call."""
    artifact_id: str
    ok: bool
    error: Optional[PersistenceError] = None

    @classmethod
    def failed(cls, artifact_id: str, message: str, cause: Exception) -> ArtifactDownloadResult:
        """Result for an artifact whose data could not be stored, chained to ``cause``."""
        error = PersistenceError(message)
        error.__cause__ = cause
        return cls(artifact_id, ok=False, error=error)


class ArtifactDataDownloader:
    """Downloads artifact and app binaries from another connector."""

    def __init__(
        self,
        artifact_service: ArtifactRequestService,
        agreements: AgreementService,
        persistence: EntityPersistenceService,
        failure_policy: ArtifactFailurePolicy = ArtifactFailurePolicy.ABORT,
    ):
        self._artifact_service = artifact_service
        self._agreements = agreements
        self._persistence = persistence
        self._failure_policy = ArtifactFailurePolicy(failure_policy)

    @property
    def failure_policy(self) -> ArtifactFailurePolicy:
        return self._failure_policy

    async def download(
        self,
        recipient: str,
        artifacts: list[str],
        agreement_id: str,
    ) -> list[ArtifactDownloadResult]:
        """
        Request and persist the data of every artifact.

        The agreement is resolved to its remote id once; that id goes out
        with each request as the transfer contract.

        Returns one result per artifact that was attempted.

        Raises:
            ResourceNotFound: the agreement is unknown locally.
            UnexpectedResponseKind / MessageTransportError: an exchange failed.
            PersistenceError: storing an artifact failed (ABORT policy only).
        """
        transfer_contract = self._agreements.get(agreement_id).remote_id
        logger.info("Downloading %d artifact(s) from %s under %s (policy=%s)",
                    len(artifacts), recipient, transfer_contract, self._failure_policy.value)

        results: list[ArtifactDownloadResult] = []
        for artifact in artifacts:
            response = await self._artifact_service.send_message(
                recipient, artifact, transfer_contract,
            )
            try:
                await self._persistence.save_data(response, artifact)
            except PERSISTENCE_FAILURES as e:
                logger.warning("Could not save data for artifact, it may be retried later. "
                               "[artifact=%s, exception=%s]", artifact, e)
                message = f"Could not save data for artifact {artifact}: {e}"
                if self._failure_policy is ArtifactFailurePolicy.ABORT:
                    raise PersistenceError(message) from e
                results.append(ArtifactDownloadResult.failed(artifact, message, e))
                continue
            results.append(ArtifactDownloadResult(artifact, ok=True))
        return results

    async def download_app_artifact(self, recipient: str, app_artifact_id: str) -> None:
        """Request one app binary (no agreement needed) and persist it."""
        response = await self._artifact_service.send_message(recipient, app_artifact_id, None)
        try:
            await self._persistence.save_app_data(response, app_artifact_id)
        except PERSISTENCE_FAILURES as e:
            logger.warning("Could not save data for app artifact, it may be retried later. "
                           "[app artifact=%s, exception=%s]", app_artifact_id, e)
            raise PersistenceError(
                f"Could not save data for app artifact {app_artifact_id}: {e}"
            ) from e
