"""
StaticIdentityProvider: the default IdentityProvider.

Connector id and model version are fixed at construction. The security
token is read on every call, either from a supplier callable (for token
services that refresh) or from the configured static value.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from dsconnector.core.errors import ConfigError
from dsconnector.core.models import ConnectorIdentity
from dsconnector.infra.config import ConnectorConfig

logger = logging.getLogger(__name__)


class StaticIdentityProvider:
    """IdentityProvider with a fixed identity and a pluggable token source."""

    def __init__(
        self,
        connector_id: str,
        outbound_model_version: str,
        security_token: str = "",
        token_supplier: Optional[Callable[[], str]] = None,
    ):
        if not connector_id:
            raise ConfigError("connector_id must not be empty")
        self._connector_id = connector_id
        self._model_version = outbound_model_version
        self._security_token = security_token
        self._token_supplier = token_supplier

    @classmethod
    def from_config(
        cls,
        config: ConnectorConfig,
        token_supplier: Optional[Callable[[], str]] = None,
    ) -> StaticIdentityProvider:
        return cls(
            connector_id=config.connector_id,
            outbound_model_version=config.outbound_model_version,
            security_token=config.security_token,
            token_supplier=token_supplier,
        )

    def current_identity(self) -> ConnectorIdentity:
        if self._token_supplier is not None:
            token = self._token_supplier()
        else:
            token = self._security_token
        if not token:
            logger.debug("No security token available for %s", self._connector_id)
        return ConnectorIdentity(
            connector_id=self._connector_id,
            outbound_model_version=self._model_version,
            security_token=token,
        )
