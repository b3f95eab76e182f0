"""
Shared test fixtures for the connector engine tests.

Provides a scripted mock peer (transport), a recording persistence
service, a mock identity provider and sample contracts.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

import pytest

from dsconnector.contracts.models import (
    AgreementRecord,
    ContractAgreement,
    ContractRequest,
    Rule,
    RuleType,
)
from dsconnector.core.errors import MessageTransportError
from dsconnector.core.models import ConnectorIdentity, MessageKind, Payload, Response
from dsconnector.infra.memory import InMemoryAgreementService


CONSUMER = "https://consumer.example.org"
PROVIDER = "https://provider.example.org"
PROVIDER_API = "https://provider.example.org/api/ids/data"

# Reply kind a well-behaved peer sends for each request kind
REPLY_KINDS = {
    MessageKind.DESCRIPTION_REQUEST.value: MessageKind.DESCRIPTION_RESPONSE,
    MessageKind.ARTIFACT_REQUEST.value: MessageKind.ARTIFACT_RESPONSE,
    MessageKind.CONTRACT_REQUEST.value: MessageKind.CONTRACT_AGREEMENT,
    MessageKind.CONTRACT_AGREEMENT.value: MessageKind.MESSAGE_PROCESSED,
}

SUBJECT_FIELDS = ("ids:requestedElement", "ids:requestedArtifact", "ids:transferContract")


# ============ Sample Data ============

READ_RULE = Rule(id="https://provider.example.org/rules/1", action="USE",
                 target="https://provider.example.org/artifacts/a1")
LOG_RULE = Rule(id="https://provider.example.org/rules/2", type=RuleType.OBLIGATION,
                action="LOG", target="https://provider.example.org/artifacts/a1",
                constraints=["logging-server=https://log.example.org"])


def make_request(**overrides) -> ContractRequest:
    data = {
        "id": "https://provider.example.org/contracts/c1",
        "consumer": CONSUMER,
        "provider": PROVIDER,
        "start": datetime(2026, 1, 1, tzinfo=timezone.utc),
        "end": datetime(2026, 12, 31, tzinfo=timezone.utc),
        "rules": [READ_RULE, LOG_RULE],
    }
    data.update(overrides)
    return ContractRequest(**data)


def make_agreement(**overrides) -> ContractAgreement:
    data = {
        "id": "https://provider.example.org/agreements/ag1",
        "consumer": CONSUMER,
        "provider": PROVIDER,
        "start": datetime(2026, 1, 1, tzinfo=timezone.utc),
        "end": datetime(2026, 12, 31, tzinfo=timezone.utc),
        "rules": [LOG_RULE, READ_RULE],
    }
    data.update(overrides)
    return ContractAgreement(**data)


def reply(kind: MessageKind | str, payload: Payload = "", **fields: str) -> Response:
    kind_value = kind.value if isinstance(kind, MessageKind) else kind
    header = {"@type": kind_value, "@id": "https://w3id.org/idsa/autogen/reply/1"}
    header.update(fields)
    return Response(header=header, payload=payload)


# ============ Mock Identity ============

class MockIdentityProvider:
    """Hands out a fixed identity; counts how often it was asked."""

    def __init__(self, token: str = "token-1"):
        self.token = token
        self.calls = 0

    def current_identity(self) -> ConnectorIdentity:
        self.calls += 1
        return ConnectorIdentity(
            connector_id=CONSUMER,
            outbound_model_version="4.2.7",
            security_token=self.token,
        )


# ============ Mock Peer (Transport) ============

class MockPeer:
    """
    Scripted MessageTransport.

    By default answers every request with the matching reply kind and a
    payload naming the requested subject. Replies and failures can be
    scripted per subject id.
    """

    def __init__(self):
        self.calls: list[tuple[str, dict[str, str], Payload]] = []
        self._replies: dict[str, Response] = {}
        self._failures: dict[str, Exception] = {}

    def set_reply(self, subject: str, response: Response) -> None:
        self._replies[subject] = response

    def fail_on(self, subject: str, error: Optional[Exception] = None) -> None:
        self._failures[subject] = error or MessageTransportError(f"peer unreachable for {subject}")

    @staticmethod
    def subject_of(header: dict[str, str]) -> Optional[str]:
        for name in SUBJECT_FIELDS[:2]:
            if name in header:
                return header[name]
        return header.get(SUBJECT_FIELDS[2])

    def subjects(self) -> list[Optional[str]]:
        return [self.subject_of(header) for _, header, _ in self.calls]

    async def send(self, recipient: str, header: dict[str, str], payload: Payload) -> Response:
        self.calls.append((recipient, header, payload))
        subject = self.subject_of(header)
        if subject in self._failures:
            raise self._failures[subject]
        if subject in self._replies:
            return self._replies[subject]
        return reply(REPLY_KINDS[header["@type"]], f"payload-for-{subject}")


# ============ Mock Persistence ============

class MockPersistence:
    """Records every persistence call in order; can be told to fail per subject."""

    def __init__(self):
        self.calls: list[tuple[str, str]] = []
        self.metadata_args: list[tuple[Response, list[str], bool, str]] = []
        self._failures: dict[str, Exception] = {}

    def fail_on(self, subject: str, error: Exception) -> None:
        self._failures[subject] = error

    def _record(self, method: str, subject: str) -> None:
        self.calls.append((method, subject))
        if subject in self._failures:
            raise self._failures[subject]

    async def save_metadata(self, response, artifacts, auto_download, recipient) -> None:
        self.metadata_args.append((response, artifacts, auto_download, recipient))
        self._record("save_metadata", response.payload_text().removeprefix("payload-for-"))

    async def save_data(self, response, artifact_id) -> None:
        self._record("save_data", artifact_id)

    async def save_app_data(self, response, app_id) -> None:
        self._record("save_app_data", app_id)

    async def save_app_resource(self, response, recipient) -> None:
        self._record("save_app_resource", response.payload_text().removeprefix("payload-for-"))


# ============ Fixtures ============

@pytest.fixture
def identity() -> MockIdentityProvider:
    return MockIdentityProvider()


@pytest.fixture
def peer() -> MockPeer:
    return MockPeer()


@pytest.fixture
def persistence() -> MockPersistence:
    return MockPersistence()


@pytest.fixture
def agreements() -> InMemoryAgreementService:
    return InMemoryAgreementService([
        AgreementRecord(
            agreement_id="agr_local_1",
            remote_id="https://provider.example.org/agreements/ag1",
        ),
    ])


@pytest.fixture
def contract_request() -> ContractRequest:
    return make_request()
