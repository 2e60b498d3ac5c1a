"""Main orchestration for the ingest pipeline.

Builds jobs from the manifest (or from the archives already in the data
directory), wires the download, extraction and parse stages, and runs the
jobs with bounded concurrency under the live job board.
"""

from __future__ import annotations

from pathlib import Path

from stackdump.config.settings import AppSettings, load_config
from stackdump.core import BaseOrchestrator
from stackdump.db.engine import dispose_engines
from stackdump.ingest.archive import ArchiveStage
from stackdump.ingest.client import DumpClient
from stackdump.ingest.download import DownloadStage
from stackdump.ingest.jobs import Done, Error, Job, discover_jobs, load_manifest
from stackdump.ingest.logger import logger
from stackdump.ingest.parse import ParseStage
from stackdump.ingest.scheduler import JobPipeline, JobScheduler


def build_jobs(settings: AppSettings) -> list[Job]:
    """Jobs from the configured manifest, or from leftover archives."""
    if settings.site_list is not None:
        jobs = load_manifest(settings.site_list, settings.data_path)
        logger.jobs_found(len(jobs), str(settings.site_list))
    else:
        jobs = discover_jobs(settings.data_path, settings.archive_extension)
        logger.jobs_found(len(jobs), f"{settings.data_path} (*{settings.archive_extension})")
    return jobs


class IngestOrchestrator(BaseOrchestrator):
    """Orchestrates the full ingest pipeline."""

    def __init__(self, settings: AppSettings, client: DumpClient | None = None) -> None:
        super().__init__(settings.resolved_database_url())
        self.settings = settings
        self.client = client or DumpClient(
            user_agent=settings.user_agent,
            timeout=settings.http_timeout,
        )
        # Built before run() so manifest errors surface before any work
        self.jobs: list[Job] = build_jobs(settings)

    async def _run_pipeline(self) -> None:
        """Execute the ingest pipeline."""
        if not self.jobs:
            logger.warning("Nothing to do: no jobs")
            return

        Path(self.settings.data_path).mkdir(parents=True, exist_ok=True)

        async with self.client as client:
            pipeline = JobPipeline(
                [
                    DownloadStage(client, chunk_size=self.settings.download_chunk_size),
                    ArchiveStage(),
                    ParseStage(self.writer, batch_size=self.settings.insert_batch_size),
                ]
            )
            scheduler = JobScheduler(pipeline, self.settings.max_concurrent_jobs)
            with logger.job_board(self.jobs):
                await scheduler.run(self.jobs)

    @property
    def failures(self) -> dict[str, str]:
        return {
            job.name: job.state.message
            for job in self.jobs
            if isinstance(job.state, Error)
        }

    def _log_summary(self, elapsed: float) -> None:
        """Log the final ingest summary."""
        failures = self.failures
        logger.summary(
            done=sum(isinstance(job.state, Done) for job in self.jobs),
            failed=len(failures),
            elapsed=elapsed,
            failures=failures,
        )


async def run_ingest(
    config_path: str = "config.json",
    overrides: dict[str, object] | None = None,
) -> list[Job]:
    """Entry point for running the ingest pipeline.

    Args:
        config_path: JSON config file
        overrides: Settings given on the command line (win over the file)

    Returns:
        The jobs, each Done or Error
    """
    settings = load_config(config_path)
    if overrides:
        settings = AppSettings(**{**settings.model_dump(), **overrides})

    orchestrator = IngestOrchestrator(settings)
    try:
        await orchestrator.run()
    finally:
        await dispose_engines()
    return orchestrator.jobs
