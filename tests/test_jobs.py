"""Unit tests for stackdump.ingest.jobs."""

from __future__ import annotations

from pathlib import Path

import pytest

from stackdump.ingest.jobs import (
    Done,
    Downloading,
    Error,
    Job,
    JobStateError,
    ManifestError,
    Parsing,
    Unzipping,
    Wait,
    discover_jobs,
    load_manifest,
    parse_manifest,
)


# ---------------------------------------------------------------------------
# TestJobState
# ---------------------------------------------------------------------------


class TestJobState:
    """Tests for the job state union."""

    def test_terminal_states(self) -> None:
        assert Done().is_terminal
        assert Error("x").is_terminal
        assert not Wait().is_terminal
        assert not Parsing(percent=10).is_terminal

    def test_active_states(self) -> None:
        assert Downloading(1, 2).is_active
        assert Unzipping(5).is_active
        assert not Wait().is_active

    def test_active_jobs_sort_first(self) -> None:
        states = [Done(), Wait(), Error("x"), Parsing(percent=50)]

        ordered = sorted(states, key=lambda state: state.priority)

        assert ordered == [Parsing(percent=50), Error("x"), Wait(), Done()]

    def test_describe(self) -> None:
        assert Downloading(done=1024, total=2048).describe() == "downloading 1,024/2,048 bytes"
        assert Parsing(percent=30, current_entity="Post").describe() == "parsing Post 30%"
        assert Error("download error: boom").describe() == "download error: boom"

    def test_downloading_fraction_unknown_total(self) -> None:
        assert Downloading(done=10, total=0).fraction is None
        assert Downloading(done=5, total=10).fraction == 0.5


# ---------------------------------------------------------------------------
# TestJob
# ---------------------------------------------------------------------------


class TestJob:
    """Tests for Job."""

    def test_starts_waiting(self) -> None:
        assert Job(archive_path=Path("data/acme.7z")).state == Wait()

    def test_extract_dir_is_sibling_named_after_stem(self) -> None:
        job = Job(archive_path=Path("data/tor.stackexchange.com.7z"))

        assert job.extract_dir == Path("data/tor.stackexchange.com")
        assert job.name == "tor.stackexchange.com.7z"

    def test_extract_dir_without_suffix(self) -> None:
        job = Job(archive_path=Path("data/acme"))

        assert job.extract_dir == Path("data/acme.d")
        assert job.extract_dir.stem == "acme"

    def test_transition(self) -> None:
        job = Job(archive_path=Path("a.7z"))

        job.transition(Unzipping(10))

        assert job.state == Unzipping(10)

    @pytest.mark.parametrize("terminal", [Done(), Error("boom")])
    def test_no_transition_out_of_terminal_state(self, terminal) -> None:
        job = Job(archive_path=Path("a.7z"))
        job.transition(terminal)

        with pytest.raises(JobStateError):
            job.transition(Parsing(percent=0))

        assert job.state == terminal


# ---------------------------------------------------------------------------
# TestManifest
# ---------------------------------------------------------------------------


class TestManifest:
    """Tests for manifest parsing and archive discovery."""

    def test_parse_manifest(self) -> None:
        text = """
# sites to mirror
tor.stackexchange.com.7z https://archive.org/download/stackexchange/tor.stackexchange.com.7z

ai.stackexchange.com.7z   https://archive.org/download/stackexchange/ai.stackexchange.com.7z
"""
        jobs = parse_manifest(text, Path("data"))

        assert [job.archive_path for job in jobs] == [
            Path("data/tor.stackexchange.com.7z"),
            Path("data/ai.stackexchange.com.7z"),
        ]
        assert jobs[0].source_ref == "https://archive.org/download/stackexchange/tor.stackexchange.com.7z"

    @pytest.mark.parametrize("line", ["only-a-name", "name url extra"])
    def test_malformed_line_raises(self, line: str) -> None:
        with pytest.raises(ManifestError, match="Line 2"):
            parse_manifest(f"a.7z http://x/a.7z\n{line}\n", Path("data"))

    def test_missing_manifest_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ManifestError, match="not found"):
            load_manifest(tmp_path / "site.list", tmp_path)

    def test_load_manifest(self, tmp_path: Path) -> None:
        manifest = tmp_path / "site.list"
        manifest.write_text("a.7z http://example.com/a.7z\n", encoding="utf-8")

        jobs = load_manifest(manifest, tmp_path / "data")

        assert jobs[0].archive_path == tmp_path / "data" / "a.7z"

    def test_discover_jobs(self, tmp_path: Path) -> None:
        (tmp_path / "b.7z").write_bytes(b"")
        (tmp_path / "a.7z").write_bytes(b"")
        (tmp_path / "a.7z.part").write_bytes(b"")
        (tmp_path / "stackdump.db").write_bytes(b"")
        (tmp_path / "c.7z").mkdir()

        jobs = discover_jobs(tmp_path)

        assert [job.name for job in jobs] == ["a.7z", "b.7z"]
        assert all(job.source_ref is None for job in jobs)

    def test_discover_jobs_missing_directory(self, tmp_path: Path) -> None:
        assert discover_jobs(tmp_path / "missing") == []
