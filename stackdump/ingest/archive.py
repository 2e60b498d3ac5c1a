"""Archive stage: extract the job's 7z archive next to it.

``data/acme.7z`` is extracted into ``data/acme/``. Entries whose destination
file already has the declared uncompressed size are left untouched; the
others are (re)extracted. Extraction runs in a worker thread while progress
is polled from the sizes of the files landing on disk.
"""

from __future__ import annotations

import asyncio
import lzma
from dataclasses import dataclass
from pathlib import Path

import py7zr
from py7zr import exceptions as py7zr_errors

from stackdump.ingest.jobs import Job, Unzipping, extraction_dir
from stackdump.ingest.logger import logger
from stackdump.ingest.scheduler import Reporter, Stage


# Failures py7zr surfaces for corrupt or truncated archives
_EXTRACTION_ERRORS = (
    py7zr_errors.ArchiveError,
    py7zr.Bad7zFile,
    lzma.LZMAError,
    EOFError,
    OSError,
)


class ArchiveError(Exception):
    """Raised when an archive cannot be listed or extracted."""


@dataclass(frozen=True)
class ArchiveEntry:
    """A file inside the archive and its declared uncompressed size."""

    name: str
    size: int


def list_entries(archive_path: Path) -> list[ArchiveEntry]:
    """List the file entries of an archive (directories excluded)."""
    try:
        with py7zr.SevenZipFile(archive_path, mode="r") as archive:
            infos = archive.list()
    except _EXTRACTION_ERRORS as e:
        raise ArchiveError(f"cannot read {archive_path.name}: {e}") from e

    return [
        ArchiveEntry(name=info.filename, size=int(info.uncompressed or 0))
        for info in infos
        if not info.is_directory
    ]


def _is_extracted(destination: Path, entry: ArchiveEntry) -> bool:
    return destination.is_file() and destination.stat().st_size == entry.size


def pending_entries(entries: list[ArchiveEntry], target_dir: Path) -> list[ArchiveEntry]:
    """Entries whose destination is missing or has the wrong size."""
    return [entry for entry in entries if not _is_extracted(target_dir / entry.name, entry)]


def _extract(archive_path: Path, target_dir: Path, names: list[str]) -> None:
    try:
        with py7zr.SevenZipFile(archive_path, mode="r") as archive:
            archive.extract(path=target_dir, targets=names)
    except _EXTRACTION_ERRORS as e:
        raise ArchiveError(f"cannot extract {archive_path.name}: {e}") from e


def _landed_bytes(target_dir: Path, entries: list[ArchiveEntry]) -> int:
    landed = 0
    for entry in entries:
        try:
            landed += min((target_dir / entry.name).stat().st_size, entry.size)
        except OSError:
            continue
    return landed


class ArchiveStage(Stage):
    error_label = "decompression"

    def __init__(self, poll_interval: float = 0.25) -> None:
        self.poll_interval = poll_interval

    async def run(self, job: Job, report: Reporter) -> None:
        archive_path = job.archive_path
        if not archive_path.is_file():
            raise ArchiveError(f"archive not found: {archive_path}")

        entries = await asyncio.to_thread(list_entries, archive_path)
        target_dir = extraction_dir(archive_path)
        pending = pending_entries(entries, target_dir)

        total = sum(entry.size for entry in entries)
        already = total - sum(entry.size for entry in pending)
        last_percent = -1

        def report_progress(landed: int) -> None:
            nonlocal last_percent
            percent = 100 if total == 0 else min(100, (already + landed) * 100 // total)
            if percent != last_percent:
                last_percent = percent
                report(Unzipping(percent=percent))

        if not pending:
            logger.debug(f"{job.name}: all {len(entries)} entries already extracted")
            report_progress(0)
            return

        for entry in pending:
            destination = target_dir / entry.name
            destination.parent.mkdir(parents=True, exist_ok=True)
            # Stale partial files would count as progress
            destination.unlink(missing_ok=True)

        report_progress(0)
        extraction = asyncio.ensure_future(
            asyncio.to_thread(
                _extract, archive_path, target_dir, [entry.name for entry in pending]
            )
        )
        while True:
            finished, _ = await asyncio.wait({extraction}, timeout=self.poll_interval)
            if finished:
                break
            report_progress(_landed_bytes(target_dir, pending))

        extraction.result()
        report_progress(_landed_bytes(target_dir, pending))
        logger.debug(
            f"{job.name}: extracted {len(pending)} of {len(entries)} entries "
            f"into {target_dir}"
        )
