"""Download stage: make sure the job's archive is present and complete.

A local file whose size equals the announced content length counts as
already downloaded; nothing is fetched again. Otherwise the body is streamed
into ``<archive>.part`` and renamed over the archive once complete.
"""

from __future__ import annotations

from stackdump.ingest.client import DownloadError, DumpClient
from stackdump.ingest.jobs import Downloading, Job
from stackdump.ingest.logger import logger
from stackdump.ingest.scheduler import Reporter, Stage


DEFAULT_CHUNK_SIZE = 1024 * 1024


class DownloadStage(Stage):
    error_label = "download"

    def __init__(self, client: DumpClient, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self.client = client
        self.chunk_size = chunk_size

    def describe_error(self, job: Job, exc: Exception) -> str:
        return f"{self.error_label} error: {exc} ({job.source_ref})"

    async def run(self, job: Job, report: Reporter) -> None:
        url = job.source_ref
        if not url:
            return

        total = await self.client.content_length(url)
        archive = job.archive_path
        if archive.is_file() and archive.stat().st_size == total:
            logger.debug(f"{job.name}: already downloaded ({total:,} bytes)")
            return

        archive.parent.mkdir(parents=True, exist_ok=True)
        partial = archive.with_name(archive.name + ".part")
        done = 0
        report(Downloading(done=done, total=total))

        async with self.client.stream(url) as response:
            with open(partial, "wb") as f:
                async for chunk in response.aiter_bytes(self.chunk_size):
                    f.write(chunk)
                    done += len(chunk)
                    report(Downloading(done=done, total=total))

        if done != total:
            raise DownloadError(f"received {done:,} of {total:,} announced bytes")

        partial.replace(archive)
        logger.debug(f"{job.name}: downloaded {total:,} bytes")
