"""Rich-based logging utilities for the ingest pipeline.

Provides the live job board, per-table load lines, job failures and the
final summary panel.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Generator, Sequence

from rich.live import Live

from stackdump.ingest.display import JobBoard
from stackdump.ingest.jobs import Job
from stackdump.utils.pipeline_logger import BasePipelineLogger


class IngestLogger(BasePipelineLogger):
    """Logger for ingest runs with rich output.

    Extends BasePipelineLogger with job, entity and summary output.
    """

    def __init__(self) -> None:
        super().__init__(__name__)

    # -------------------------------------------------------------------------
    # Ingest-specific: Jobs
    # -------------------------------------------------------------------------

    def jobs_found(self, count: int, source: str) -> None:
        """Log how many jobs were built and where they came from."""
        self._logger.info(f"{count} job(s) from {source}")

    @contextmanager
    def job_board(
        self, jobs: Sequence[Job], refresh_per_second: float = 4
    ) -> Generator[JobBoard, None, None]:
        """Show the live job board while the block runs."""
        board = JobBoard(jobs)
        with Live(
            board,
            console=self.console,
            refresh_per_second=refresh_per_second,
        ):
            yield board

    def job_failed(self, job_name: str, message: str) -> None:
        """Log a job that ended in Error."""
        self._logger.error(f"{job_name}: {message}")

    # -------------------------------------------------------------------------
    # Ingest-specific: Entity Processing
    # -------------------------------------------------------------------------

    def entity_loaded(self, table_name: str, count: int) -> None:
        """Log a table loaded from its entity file."""
        with self.block(table_name) as block:
            if count:
                block.result(f"loaded {count:,} rows")
            else:
                block.skip("empty file, no table created")

    def entity_skip(self, table_name: str, reason: str) -> None:
        """Log skipped entity ingestion."""
        with self.block(table_name) as block:
            block.skip(reason)

    # -------------------------------------------------------------------------
    # Summary
    # -------------------------------------------------------------------------

    def summary(
        self,
        done: int = 0,
        failed: int = 0,
        elapsed: float = 0.0,
        failures: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> None:
        """Print final ingest summary."""
        self.print_summary(
            "Ingest",
            elapsed=elapsed,
            stats={
                "Jobs done": done,
                "Jobs failed": failed,
            },
            extra_sections={"Failures": dict(failures)} if failures else None,
            style="red" if failed else "cyan",
        )


# Global logger instance
logger = IngestLogger()
