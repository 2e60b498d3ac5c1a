"""Jobs and their lifecycle.

A Job is one unit of pipeline work for one source archive. Its state is a
small tagged union:

    Wait -> Downloading -> Unzipping -> Parsing -> Done
                  \\            \\           \\
                   +-----------+-----------+--> Error

Done and Error are terminal: no transition leaves them.

Jobs come either from a manifest file (one ``<local_name> <url>`` pair per
line) or, when no manifest is configured, from the archives already sitting
in the data directory.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar


class JobStateError(Exception):
    """Raised on a transition out of a terminal state."""


class ManifestError(Exception):
    """Raised when the manifest file is missing or has a malformed line."""


# -------------------------------------------------------------------------
# States
# -------------------------------------------------------------------------


@dataclass(frozen=True)
class JobState:
    """Base of the job state union."""

    # Display order: active states first, then errors, waiting, done
    priority: ClassVar[int] = 0
    is_terminal: ClassVar[bool] = False
    is_active: ClassVar[bool] = False
    label: ClassVar[str] = ""

    @property
    def fraction(self) -> float | None:
        """Progress of the current stage in [0, 1], when known."""
        return None

    def describe(self) -> str:
        return self.label


@dataclass(frozen=True)
class Wait(JobState):
    priority: ClassVar[int] = 3
    label: ClassVar[str] = "waiting"


@dataclass(frozen=True)
class Downloading(JobState):
    done: int = 0
    total: int = 0

    priority: ClassVar[int] = 0
    is_active: ClassVar[bool] = True
    label: ClassVar[str] = "downloading"

    @property
    def fraction(self) -> float | None:
        if self.total <= 0:
            return None
        return min(self.done / self.total, 1.0)

    def describe(self) -> str:
        return f"downloading {self.done:,}/{self.total:,} bytes"


@dataclass(frozen=True)
class Unzipping(JobState):
    percent: int = 0

    priority: ClassVar[int] = 0
    is_active: ClassVar[bool] = True
    label: ClassVar[str] = "unzipping"

    @property
    def fraction(self) -> float | None:
        return self.percent / 100

    def describe(self) -> str:
        return f"unzipping {self.percent}%"


@dataclass(frozen=True)
class Parsing(JobState):
    percent: int = 0
    current_entity: str = ""

    priority: ClassVar[int] = 0
    is_active: ClassVar[bool] = True
    label: ClassVar[str] = "parsing"

    @property
    def fraction(self) -> float | None:
        return self.percent / 100

    def describe(self) -> str:
        if self.current_entity:
            return f"parsing {self.current_entity} {self.percent}%"
        return f"parsing {self.percent}%"


@dataclass(frozen=True)
class Done(JobState):
    priority: ClassVar[int] = 4
    is_terminal: ClassVar[bool] = True
    label: ClassVar[str] = "done"

    @property
    def fraction(self) -> float | None:
        return 1.0


@dataclass(frozen=True)
class Error(JobState):
    message: str = ""

    priority: ClassVar[int] = 1
    is_terminal: ClassVar[bool] = True
    label: ClassVar[str] = "error"

    def describe(self) -> str:
        return self.message


# -------------------------------------------------------------------------
# Job
# -------------------------------------------------------------------------


def extraction_dir(archive_path: Path) -> Path:
    """Directory an archive is extracted into, alongside it.

    "data/acme.7z" -> "data/acme"; an archive without a suffix ("data/acme")
    extracts into "data/acme.d" so the two never collide.
    """
    if archive_path.suffix:
        return archive_path.with_suffix("")
    return archive_path.with_name(archive_path.name + ".d")


@dataclass
class Job:
    """One source archive moving through download, extraction and parsing.

    Only the task running the job mutates it.
    """

    archive_path: Path
    source_ref: str | None = None
    state: JobState = field(default_factory=Wait)

    @property
    def name(self) -> str:
        return self.archive_path.name

    @property
    def extract_dir(self) -> Path:
        """Sibling directory the archive is extracted into."""
        return extraction_dir(self.archive_path)

    def transition(self, state: JobState) -> None:
        """Move to ``state``.

        Raises:
            JobStateError: If the job already finished (Done or Error)
        """
        if self.state.is_terminal:
            raise JobStateError(
                f"{self.name}: cannot leave {self.state.label} for {state.label}"
            )
        self.state = state


# -------------------------------------------------------------------------
# Job sources
# -------------------------------------------------------------------------


def parse_manifest(text: str, data_path: Path) -> list[Job]:
    """Build jobs from manifest text.

    Every non-empty line not starting with ``#`` is ``<local_name> <url>``;
    the archive is stored as ``data_path / local_name``.
    """
    jobs: list[Job] = []
    for line_number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        parts = line.split()
        if len(parts) != 2:
            raise ManifestError(
                f"Line {line_number}: expected '<local_name> <url>', got {line!r}"
            )
        local_name, url = parts
        jobs.append(Job(archive_path=data_path / local_name, source_ref=url))
    return jobs


def load_manifest(path: Path, data_path: Path) -> list[Job]:
    """Read and parse a manifest file."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ManifestError(f"Manifest not found: {path}") from e
    except OSError as e:
        raise ManifestError(f"Cannot read manifest {path}: {e}") from e
    return parse_manifest(text, data_path)


def discover_jobs(data_path: Path, extension: str = ".7z") -> list[Job]:
    """One job per archive already present in ``data_path`` (name order)."""
    if not data_path.is_dir():
        return []
    return [
        Job(archive_path=path)
        for path in sorted(data_path.iterdir())
        if path.is_file() and path.suffix == extension
    ]
