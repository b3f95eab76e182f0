"""
MetadataDownloader: fetches remote descriptions and hands them to storage.

Resources are processed strictly in the given order, one exchange at a
time. Metadata retrieval is must-all-succeed: the first failure, whether
protocol or persistence, aborts the rest of the list.
"""

from __future__ import annotations

import logging

from dsconnector.core.errors import (
    MessageResponseError,
    PersistenceError,
    ResourceNotFound,
)
from dsconnector.core.protocols import EntityPersistenceService
from dsconnector.messaging.services import DescriptionRequestService

logger = logging.getLogger(__name__)

# Collaborator failures that are reported as PersistenceError
PERSISTENCE_FAILURES = (OSError, ResourceNotFound, MessageResponseError)


class MetadataDownloader:
    """Downloads resource and app descriptions from another connector."""

    def __init__(
        self,
        description_service: DescriptionRequestService,
        persistence: EntityPersistenceService,
    ):
        self._description_service = description_service
        self._persistence = persistence

    async def download(
        self,
        recipient: str,
        resources: list[str],
        artifacts: list[str],
        auto_download: bool,
    ) -> None:
        """
        Request the description of every resource and persist it.

        The full ``artifacts`` list and ``auto_download`` flag are passed
        with every description; the persistence service decides which
        artifacts to materialize.

        Raises:
            UnexpectedResponseKind: a peer answered with the wrong kind.
            MessageTransportError: an exchange failed.
            PersistenceError: storing a description failed.
        """
        logger.info("Downloading metadata for %d resource(s) from %s", len(resources), recipient)
        for resource in resources:
            response = await self._description_service.send_message(recipient, resource)
            try:
                await self._persistence.save_metadata(response, artifacts, auto_download, recipient)
            except PERSISTENCE_FAILURES as e:
                logger.warning("Could not save metadata. [resource=%s, exception=%s]", resource, e)
                raise PersistenceError(f"Could not save metadata for {resource}: {e}") from e

    async def download_app_resource(self, recipient: str, app_resource_id: str) -> None:
        """Request one app description and persist it."""
        response = await self._description_service.send_message(recipient, app_resource_id)
        try:
            await self._persistence.save_app_resource(response, recipient)
        except PERSISTENCE_FAILURES as e:
            logger.warning("Could not save app resource. [app resource=%s, exception=%s]",
                           app_resource_id, e)
            raise PersistenceError(f"Could not save app resource {app_resource_id}: {e}") from e
