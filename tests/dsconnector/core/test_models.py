"""Tests for core data models and the error hierarchy."""

from datetime import datetime, timezone

import pytest

from dsconnector.core.errors import (
    AgreementMismatch,
    DSConnectorError,
    InvalidDescriptor,
    MessageTransportError,
    PersistenceError,
    UnexpectedResponseKind,
)
from dsconnector.core.models import (
    ConnectorIdentity,
    Message,
    MessageDescriptor,
    MessageKind,
    Response,
    generate_id,
    generate_message_id,
)


class TestGenerateId:
    def test_generates_unique_ids(self):
        ids = {generate_id("test") for _ in range(100)}
        assert len(ids) == 100

    def test_prefix_applied(self):
        assert generate_id("agr").startswith("agr_")

    def test_message_id_uses_kind_name(self):
        mid = generate_message_id(MessageKind.ARTIFACT_REQUEST)
        assert mid.startswith("https://w3id.org/idsa/autogen/artifactRequestMessage/")


class TestMessageKind:
    def test_local_name(self):
        assert MessageKind.DESCRIPTION_REQUEST.local_name == "descriptionRequestMessage"
        assert MessageKind.REJECTION.local_name == "rejectionMessage"

    def test_kind_is_string(self):
        assert MessageKind.REJECTION == "ids:RejectionMessage"


class TestMessageDescriptor:
    def test_is_immutable(self):
        desc = MessageDescriptor(kind=MessageKind.DESCRIPTION_REQUEST, recipient="https://p")
        with pytest.raises(AttributeError):
            desc.recipient = "https://other"

    def test_defaults(self):
        desc = MessageDescriptor(kind=MessageKind.ARTIFACT_REQUEST, recipient="https://p")
        assert desc.subject_id is None
        assert desc.transfer_contract is None
        assert desc.properties == {}


class TestMessageHeader:
    def _message(self, **kwargs) -> Message:
        data = dict(
            kind=MessageKind.ARTIFACT_REQUEST,
            id="https://w3id.org/idsa/autogen/artifactRequestMessage/1",
            issued=datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc),
            model_version="4.2.7",
            issuer_connector="https://consumer",
            sender_agent="https://consumer",
            security_token="tok",
            recipient_connector=("https://provider",),
        )
        data.update(kwargs)
        return Message(**data)

    def test_common_fields(self):
        header = self._message().to_header()
        assert header["@type"] == "ids:ArtifactRequestMessage"
        assert header["ids:modelVersion"] == "4.2.7"
        assert header["ids:issuerConnector"] == "https://consumer"
        assert header["ids:securityToken"] == "tok"
        assert header["ids:recipientConnector"] == "https://provider"
        assert header["ids:issued"].startswith("2026-03-01T12:00:00")

    def test_type_comes_first(self):
        assert next(iter(self._message().to_header())) == "@type"

    def test_optional_fields_only_when_set(self):
        header = self._message().to_header()
        assert "ids:requestedArtifact" not in header
        assert "ids:transferContract" not in header

        header = self._message(
            requested_artifact="https://provider/artifacts/a1",
            transfer_contract="https://provider/agreements/ag1",
        ).to_header()
        assert header["ids:requestedArtifact"] == "https://provider/artifacts/a1"
        assert header["ids:transferContract"] == "https://provider/agreements/ag1"

    def test_properties_merged(self):
        header = self._message(properties={"ids:depth": "10"}).to_header()
        assert header["ids:depth"] == "10"


class TestResponse:
    def test_kind_reads_type_header(self):
        resp = Response(header={"@type": "ids:DescriptionResponseMessage"}, payload="{}")
        assert resp.kind == "ids:DescriptionResponseMessage"

    def test_kind_missing(self):
        assert Response(header={}).kind is None

    def test_rejection_reason(self):
        resp = Response(header={"@type": "ids:RejectionMessage",
                                "ids:rejectionReason": "idsc:NOT_AUTHORIZED"})
        assert resp.rejection_reason == "idsc:NOT_AUTHORIZED"

    def test_payload_conversions(self):
        assert Response(header={}, payload=b"abc").payload_text() == "abc"
        assert Response(header={}, payload="abc").payload_bytes() == b"abc"


class TestConnectorIdentity:
    def test_repr_hides_token(self):
        ident = ConnectorIdentity("https://c", "4.2.7", "super-secret")
        assert "super-secret" not in repr(ident)


class TestErrors:
    def test_all_errors_share_root(self):
        for exc in (InvalidDescriptor("x"), MessageTransportError("x"),
                    PersistenceError("x"), AgreementMismatch(["x"])):
            assert isinstance(exc, DSConnectorError)

    def test_unexpected_kind_carries_details(self):
        resp = Response(header={"@type": "ids:RejectionMessage"}, payload="denied")
        err = UnexpectedResponseKind(
            expected="ids:DescriptionResponseMessage",
            actual="ids:RejectionMessage",
            response=resp,
            body=resp.payload,
            rejection_reason="idsc:NOT_FOUND",
        )
        assert err.body == "denied"
        assert err.response is resp
        assert "idsc:NOT_FOUND" in str(err)

    def test_unexpected_kind_without_type(self):
        err = UnexpectedResponseKind(expected="ids:ArtifactResponseMessage", actual=None)
        assert "no message type" in str(err)

    def test_mismatch_lists_every_problem(self):
        err = AgreementMismatch(["provider differs", "rules differ"])
        assert err.mismatches == ["provider differs", "rules differ"]
        assert "provider differs" in str(err) and "rules differ" in str(err)
