"""Job pipeline and bounded-concurrency scheduler.

Each job runs its stages strictly in order (download, extract, parse); a
stage only starts when the previous one succeeded. A failing stage turns the
job into ``Error("<label> error: <cause>")`` and stops that job only.

Up to ``max_concurrent`` jobs run at once; a waiting job is admitted as soon
as a slot frees, in the order the jobs were given.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Callable, Sequence

from stackdump.ingest.jobs import Done, Error, Job, JobState
from stackdump.ingest.logger import logger


Reporter = Callable[[JobState], None]
JobListener = Callable[[Job], None]


class Stage(ABC):
    """One step of a job's pipeline."""

    # Prefix of the job's error message when this stage fails
    error_label: str = "stage"

    @abstractmethod
    async def run(self, job: Job, report: Reporter) -> None:
        """Do this stage's work for ``job``, reporting progress states."""
        ...

    def describe_error(self, job: Job, exc: Exception) -> str:
        return f"{self.error_label} error: {exc}"


class JobPipeline:
    """Runs every stage of one job and records the outcome on the job."""

    def __init__(
        self,
        stages: Sequence[Stage],
        listener: JobListener | None = None,
    ) -> None:
        self.stages = list(stages)
        self.listener = listener

    def _apply(self, job: Job, state: JobState) -> None:
        job.transition(state)
        if self.listener is not None:
            self.listener(job)

    async def process(self, job: Job) -> Job:
        """Run the job to Done or Error. Never raises for stage failures."""

        def report(state: JobState) -> None:
            self._apply(job, state)

        for stage in self.stages:
            try:
                await stage.run(job, report)
            except Exception as e:
                message = stage.describe_error(job, e)
                logger.job_failed(job.name, message)
                self._apply(job, Error(message))
                return job

        self._apply(job, Done())
        return job


class JobScheduler:
    """Runs jobs through a pipeline with at most ``max_concurrent`` active."""

    def __init__(self, pipeline: JobPipeline, max_concurrent: int = 3) -> None:
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        self.pipeline = pipeline
        self.max_concurrent = max_concurrent
        self.active = 0
        self.peak_active = 0

    async def _run_one(self, job: Job, slots: asyncio.Semaphore) -> Job:
        async with slots:
            self.active += 1
            self.peak_active = max(self.peak_active, self.active)
            try:
                return await self.pipeline.process(job)
            finally:
                self.active -= 1

    async def run(self, jobs: Sequence[Job]) -> list[Job]:
        """Return once every job is Done or Error."""
        slots = asyncio.Semaphore(self.max_concurrent)
        return list(await asyncio.gather(*(self._run_one(job, slots) for job in jobs)))
