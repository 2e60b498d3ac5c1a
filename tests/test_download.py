"""Tests for stackdump.ingest.client and stackdump.ingest.download."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import httpx
import pytest

from stackdump.ingest.client import (
    DownloadError,
    DumpClient,
    MissingContentLengthError,
    UnexpectedStatusError,
)
from stackdump.ingest.download import DownloadStage
from stackdump.ingest.jobs import Downloading, Job, JobState


URL = "https://archive.example.org/acme.7z"
BODY = b"7z-archive-bytes" * 100


class FakeServer:
    """MockTransport handler serving one archive and counting requests."""

    def __init__(
        self,
        body: bytes = BODY,
        announce_length: bool = True,
        status: int = 200,
        announced: int | None = None,
    ) -> None:
        self.body = body
        self.announce_length = announce_length
        self.status = status
        self.announced = announced
        self.requests: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request.method)
        headers = {}
        if self.announce_length:
            headers["content-length"] = str(self.announced if self.announced is not None else len(self.body))
        if request.method == "HEAD":
            return httpx.Response(self.status, headers=headers)
        return httpx.Response(self.status, headers=headers, content=self.body)

    @property
    def gets(self) -> int:
        return self.requests.count("GET")


def _client(server: FakeServer) -> DumpClient:
    return DumpClient(user_agent="stackdump-tests", transport=httpx.MockTransport(server))


async def _download(server: FakeServer, job: Job, chunk_size: int = 256) -> list[JobState]:
    states: list[JobState] = []
    async with _client(server) as client:
        await DownloadStage(client, chunk_size=chunk_size).run(job, states.append)
    return states


# ---------------------------------------------------------------------------
# TestDumpClient
# ---------------------------------------------------------------------------


class TestDumpClient:
    """Tests for DumpClient."""

    @pytest.mark.asyncio
    async def test_content_length(self) -> None:
        async with _client(FakeServer()) as client:
            assert await client.content_length(URL) == len(BODY)

    @pytest.mark.asyncio
    async def test_missing_content_length(self) -> None:
        async with _client(FakeServer(announce_length=False)) as client:
            with pytest.raises(MissingContentLengthError):
                await client.content_length(URL)

    @pytest.mark.asyncio
    async def test_unexpected_status(self) -> None:
        async with _client(FakeServer(status=404)) as client:
            with pytest.raises(UnexpectedStatusError) as exc_info:
                await client.content_length(URL)

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_transport_error_wrapped(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with DumpClient(user_agent="t", transport=httpx.MockTransport(refuse)) as client:
            with pytest.raises(DownloadError, match="connection refused"):
                await client.content_length(URL)

    @pytest.mark.asyncio
    async def test_sends_user_agent(self) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.headers["user-agent"])
            return httpx.Response(200, headers={"content-length": "0"})

        async with DumpClient(user_agent="agent/1.0", transport=httpx.MockTransport(handler)) as client:
            await client.content_length(URL)

        assert seen == ["agent/1.0"]

    @pytest.mark.asyncio
    async def test_requires_context_manager(self) -> None:
        with pytest.raises(RuntimeError):
            await DumpClient(user_agent="t").content_length(URL)


# ---------------------------------------------------------------------------
# TestDownloadStage
# ---------------------------------------------------------------------------


@patch("stackdump.ingest.download.logger")
class TestDownloadStage:
    """Tests for DownloadStage.run."""

    @pytest.mark.asyncio
    async def test_downloads_archive(self, _logger, tmp_path: Path) -> None:
        server = FakeServer()
        job = Job(archive_path=tmp_path / "data" / "acme.7z", source_ref=URL)

        states = await _download(server, job)

        assert job.archive_path.read_bytes() == BODY
        assert not (tmp_path / "data" / "acme.7z.part").exists()
        assert states[0] == Downloading(done=0, total=len(BODY))
        assert states[-1] == Downloading(done=len(BODY), total=len(BODY))

    @pytest.mark.asyncio
    async def test_second_run_performs_no_get(self, _logger, tmp_path: Path) -> None:
        server = FakeServer()
        job = Job(archive_path=tmp_path / "acme.7z", source_ref=URL)
        await _download(server, job)

        states = await _download(server, Job(archive_path=job.archive_path, source_ref=URL))

        assert server.gets == 1
        assert server.requests.count("HEAD") == 2
        assert states == []

    @pytest.mark.asyncio
    async def test_size_mismatch_redownloads(self, _logger, tmp_path: Path) -> None:
        server = FakeServer()
        archive = tmp_path / "acme.7z"
        archive.write_bytes(b"truncated")

        await _download(server, Job(archive_path=archive, source_ref=URL))

        assert server.gets == 1
        assert archive.read_bytes() == BODY

    @pytest.mark.asyncio
    async def test_no_source_ref_is_noop(self, _logger, tmp_path: Path) -> None:
        server = FakeServer()

        states = await _download(server, Job(archive_path=tmp_path / "local.7z"))

        assert server.requests == []
        assert states == []

    @pytest.mark.asyncio
    async def test_missing_content_length_fails(self, _logger, tmp_path: Path) -> None:
        server = FakeServer(announce_length=False)
        job = Job(archive_path=tmp_path / "acme.7z", source_ref=URL)

        with pytest.raises(MissingContentLengthError):
            await _download(server, job)

        assert server.gets == 0
        assert not job.archive_path.exists()

    @pytest.mark.asyncio
    async def test_short_body_fails_and_keeps_archive_absent(self, _logger, tmp_path: Path) -> None:
        server = FakeServer(announced=len(BODY) + 10)
        job = Job(archive_path=tmp_path / "acme.7z", source_ref=URL)

        with pytest.raises(DownloadError, match="announced bytes"):
            await _download(server, job)

        assert not job.archive_path.exists()

    def test_error_message_carries_url(self, _logger) -> None:
        stage = DownloadStage(DumpClient(user_agent="t"))
        job = Job(archive_path=Path("acme.7z"), source_ref=URL)

        message = stage.describe_error(job, MissingContentLengthError("no content length announced"))

        assert message == f"download error: no content length announced ({URL})"
