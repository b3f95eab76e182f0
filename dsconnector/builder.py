"""
ConnectorBuilder: convenience factory for assembling a ConnectorEngine
with all its collaborators.

Sensible defaults come from ConnectorConfig: identity from the configured
connector id and token, an httpx transport with the configured timeouts,
and in-memory persistence and agreement storage. Override any of them.

Usage (headless)::

    from dsconnector import ConnectorBuilder

    engine = (
        ConnectorBuilder()
        .with_config(ConnectorConfig(connector_id="https://me.example.org"))
        .with_persistence(my_store)
        .build()
    )
    async with engine:
        agreement = await engine.negotiate(provider_url, contract_request)
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from dsconnector.contracts.manager import ContractManager
from dsconnector.core.engine import ConnectorEngine
from dsconnector.core.protocols import (
    AgreementService,
    EntityPersistenceService,
    IdentityProvider,
    MessageTransport,
)
from dsconnector.download.artifacts import ArtifactFailurePolicy
from dsconnector.infra.config import ConnectorConfig
from dsconnector.infra.identity import StaticIdentityProvider
from dsconnector.infra.memory import InMemoryAgreementService, InMemoryPersistence
from dsconnector.infra.transport import HttpMessageTransport

logger = logging.getLogger(__name__)


class ConnectorBuilder:
    """Fluent builder for ConnectorEngine."""

    def __init__(self) -> None:
        self._config: Optional[ConnectorConfig] = None
        self._identity: IdentityProvider | None = None
        self._token_supplier: Callable[[], str] | None = None
        self._transport: MessageTransport | None = None
        self._persistence: EntityPersistenceService | None = None
        self._agreements: AgreementService | None = None
        self._contract_manager: ContractManager | None = None
        self._failure_policy: ArtifactFailurePolicy | None = None
        self._confirm_agreements: bool | None = None

    def with_config(self, config: ConnectorConfig) -> ConnectorBuilder:
        self._config = config
        return self

    def with_identity(self, identity: IdentityProvider) -> ConnectorBuilder:
        self._identity = identity
        return self

    def with_token_supplier(self, supplier: Callable[[], str]) -> ConnectorBuilder:
        self._token_supplier = supplier
        return self

    def with_transport(self, transport: MessageTransport) -> ConnectorBuilder:
        self._transport = transport
        return self

    def with_persistence(self, persistence: EntityPersistenceService) -> ConnectorBuilder:
        self._persistence = persistence
        return self

    def with_agreements(self, agreements: AgreementService) -> ConnectorBuilder:
        self._agreements = agreements
        return self

    def with_contract_manager(self, manager: ContractManager) -> ConnectorBuilder:
        self._contract_manager = manager
        return self

    def failure_policy(self, policy: ArtifactFailurePolicy | str) -> ConnectorBuilder:
        self._failure_policy = ArtifactFailurePolicy(policy)
        return self

    def confirm_agreements(self, enabled: bool = True) -> ConnectorBuilder:
        self._confirm_agreements = enabled
        return self

    def build(self) -> ConnectorEngine:
        """Build the engine. Raises ConfigError if the identity settings are invalid."""
        config = self._config or ConnectorConfig()

        identity = self._identity or StaticIdentityProvider.from_config(
            config, token_supplier=self._token_supplier,
        )
        transport = self._transport or HttpMessageTransport.from_config(config)
        persistence = self._persistence or InMemoryPersistence()
        agreements = self._agreements or InMemoryAgreementService()

        policy = self._failure_policy or config.artifact_failure_policy

        confirm = (
            self._confirm_agreements
            if self._confirm_agreements is not None
            else config.confirm_agreements
        )

        engine = ConnectorEngine(
            identity=identity,
            transport=transport,
            persistence=persistence,
            agreements=agreements,
            description_depth=config.description_depth,
            failure_policy=policy,
            confirm_agreements=confirm,
            contract_manager=self._contract_manager,
        )

        logger.info(
            "ConnectorBuilder: built engine (transport=%s, persistence=%s, policy=%s, confirm=%s)",
            type(transport).__name__,
            type(persistence).__name__,
            policy.value,
            confirm,
        )
        return engine
