"""Live job board.

A rich renderable re-rendered by ``rich.live.Live`` on its own refresh
cadence; it only reads job state, never changes it.
"""

from __future__ import annotations

from typing import Sequence

from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text

from stackdump.ingest.jobs import Done, Error, Job


STATE_STYLES = {
    "waiting": "dim",
    "downloading": "cyan",
    "unzipping": "magenta",
    "parsing": "yellow",
    "done": "green",
    "error": "red",
}


class JobBoard:
    """Table of every job, active ones first."""

    def __init__(self, jobs: Sequence[Job], title: str = "Jobs") -> None:
        self.jobs = list(jobs)
        self.title = title

    def ordered(self) -> list[Job]:
        """Jobs by display priority, keeping manifest order within a priority."""
        return sorted(self.jobs, key=lambda job: job.state.priority)

    def counts(self) -> tuple[int, int, int]:
        """(done, failed, total)"""
        done = sum(isinstance(job.state, Done) for job in self.jobs)
        failed = sum(isinstance(job.state, Error) for job in self.jobs)
        return done, failed, len(self.jobs)

    def __rich__(self) -> Table:
        done, failed, total = self.counts()
        table = Table(
            title=f"{self.title} [dim]({done} done, {failed} failed, {total} total)[/dim]",
            expand=False,
        )
        table.add_column("Job", style="bold", no_wrap=True)
        table.add_column("State")
        table.add_column("Progress", width=32)
        table.add_column("Detail", overflow="fold")

        for job in self.ordered():
            state = job.state
            style = STATE_STYLES.get(state.label, "")
            fraction = state.fraction
            progress = (
                ProgressBar(total=100, completed=fraction * 100, width=30)
                if fraction is not None and not isinstance(state, Error)
                else Text("")
            )
            table.add_row(
                job.name,
                Text(state.label, style=style),
                progress,
                Text(state.describe(), style="red" if isinstance(state, Error) else ""),
            )
        return table
