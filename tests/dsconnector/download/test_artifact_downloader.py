"""Tests for ArtifactDataDownloader under both failure policies."""

import pytest

from dsconnector.core.errors import (
    MessageTransportError,
    PersistenceError,
    ResourceNotFound,
    UnexpectedResponseKind,
)
from dsconnector.core.models import MessageKind
from dsconnector.download.artifacts import (
    ArtifactDataDownloader,
    ArtifactDownloadResult,
    ArtifactFailurePolicy,
)
from dsconnector.messaging.services import ArtifactRequestService

from tests.dsconnector.conftest import PROVIDER_API, reply

A1 = "https://provider.example.org/artifacts/a1"
A2 = "https://provider.example.org/artifacts/a2"
A3 = "https://provider.example.org/artifacts/a3"
REMOTE_AGREEMENT = "https://provider.example.org/agreements/ag1"


def make_downloader(identity, peer, agreements, persistence,
                    policy=ArtifactFailurePolicy.ABORT) -> ArtifactDataDownloader:
    return ArtifactDataDownloader(ArtifactRequestService(identity, peer), agreements,
                                  persistence, policy)


@pytest.fixture
def downloader(identity, peer, agreements, persistence) -> ArtifactDataDownloader:
    return make_downloader(identity, peer, agreements, persistence)


class TestDownload:
    @pytest.mark.asyncio
    async def test_requests_in_order_with_remote_agreement(self, downloader, peer, persistence):
        results = await downloader.download(PROVIDER_API, [A1, A2, A3], "agr_local_1")

        assert peer.subjects() == [A1, A2, A3]
        assert all(h["ids:transferContract"] == REMOTE_AGREEMENT for _, h, _ in peer.calls)
        assert persistence.calls == [("save_data", a) for a in (A1, A2, A3)]
        assert [r.artifact_id for r in results] == [A1, A2, A3]
        assert all(r.ok for r in results)

    @pytest.mark.asyncio
    async def test_agreement_resolved_once(self, downloader, agreements, monkeypatch):
        lookups = []
        original = agreements.get

        def counting_get(agreement_id):
            lookups.append(agreement_id)
            return original(agreement_id)

        monkeypatch.setattr(agreements, "get", counting_get)
        await downloader.download(PROVIDER_API, [A1, A2], "agr_local_1")
        assert lookups == ["agr_local_1"]

    @pytest.mark.asyncio
    async def test_unknown_agreement_sends_nothing(self, downloader, peer):
        with pytest.raises(ResourceNotFound):
            await downloader.download(PROVIDER_API, [A1], "agr_unknown")
        assert peer.calls == []

    @pytest.mark.asyncio
    async def test_rejection_aborts(self, downloader, peer):
        peer.set_reply(A1, reply(MessageKind.REJECTION, "",
                                 **{"ids:rejectionReason": "idsc:NOT_AUTHORIZED"}))
        with pytest.raises(UnexpectedResponseKind) as exc_info:
            await downloader.download(PROVIDER_API, [A1, A2], "agr_local_1")
        assert exc_info.value.rejection_reason == "idsc:NOT_AUTHORIZED"
        assert peer.subjects() == [A1]

    @pytest.mark.asyncio
    async def test_default_policy_is_abort(self, downloader):
        assert downloader.failure_policy is ArtifactFailurePolicy.ABORT


class TestAbortPolicy:
    @pytest.mark.asyncio
    async def test_first_persistence_failure_stops(self, downloader, peer, persistence):
        cause = OSError("disk full")
        persistence.fail_on(A1, cause)

        with pytest.raises(PersistenceError) as exc_info:
            await downloader.download(PROVIDER_API, [A1, A2], "agr_local_1")

        assert exc_info.value.__cause__ is cause
        assert peer.subjects() == [A1]
        assert persistence.calls == [("save_data", A1)]


class TestContinuePolicy:
    @pytest.mark.asyncio
    async def test_collects_per_artifact_results(self, identity, peer, agreements, persistence):
        downloader = make_downloader(identity, peer, agreements, persistence,
                                     ArtifactFailurePolicy.CONTINUE)
        cause = OSError("disk full")
        persistence.fail_on(A2, cause)

        results = await downloader.download(PROVIDER_API, [A1, A2, A3], "agr_local_1")

        assert peer.subjects() == [A1, A2, A3]
        assert [(r.artifact_id, r.ok) for r in results] == [(A1, True), (A2, False), (A3, True)]
        assert isinstance(results[1].error, PersistenceError)
        assert results[1].error.__cause__ is cause
        assert "disk full" in str(results[1].error)

    @pytest.mark.asyncio
    async def test_protocol_errors_still_abort(self, identity, peer, agreements, persistence):
        downloader = make_downloader(identity, peer, agreements, persistence, "continue")
        peer.fail_on(A2)

        with pytest.raises(MessageTransportError):
            await downloader.download(PROVIDER_API, [A1, A2, A3], "agr_local_1")
        assert peer.subjects() == [A1, A2]


class TestDownloadAppArtifact:
    @pytest.mark.asyncio
    async def test_no_transfer_contract(self, downloader, peer, persistence):
        app = "https://provider.example.org/app-artifacts/x"
        await downloader.download_app_artifact(PROVIDER_API, app)

        assert "ids:transferContract" not in peer.calls[0][1]
        assert persistence.calls == [("save_app_data", app)]

    @pytest.mark.asyncio
    async def test_persistence_failure(self, downloader, persistence):
        app = "https://provider.example.org/app-artifacts/x"
        persistence.fail_on(app, OSError("read-only"))
        with pytest.raises(PersistenceError):
            await downloader.download_app_artifact(PROVIDER_API, app)


class TestDownloadResult:
    def test_failed_result_chains_cause(self):
        cause = OSError("read-only")
        result = ArtifactDownloadResult.failed(A1, "Could not save data", cause)

        assert result.ok is False
        assert result.artifact_id == A1
        assert isinstance(result.error, PersistenceError)
        assert result.error.__cause__ is cause
