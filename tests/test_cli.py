"""Tests for the ingest and query command lines."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from stackdump.ingest.__main__ import build_parser, main, settings_overrides
from stackdump.db.codec import CodecError
from stackdump.db.records import RecordDecodeError
from stackdump.db.writer import StoreError
from stackdump.ingest.jobs import Done, Error, Job, ManifestError
from stackdump.query import __main__ as query_cli


class TestIngestArguments:
    """Tests for argument parsing and settings overrides."""

    def test_only_given_flags_override(self) -> None:
        args = build_parser().parse_args(["--data-path", "/srv/dumps", "--jobs", "5"])

        assert settings_overrides(args) == {"data_path": "/srv/dumps", "max_concurrent_jobs": 5}

    def test_no_flags_no_overrides(self) -> None:
        assert settings_overrides(build_parser().parse_args([])) == {}


@patch("stackdump.ingest.__main__.setup_logging")
@patch("stackdump.ingest.__main__.logger")
class TestIngestMain:
    """Tests for the ingest entry point."""

    def test_success(self, mock_logger, _setup, monkeypatch: pytest.MonkeyPatch) -> None:
        job = Job(archive_path=Path("a.7z"), state=Done())
        monkeypatch.setattr("sys.argv", ["stackdump"])

        with patch("stackdump.ingest.__main__.run_ingest", new=AsyncMock(return_value=[job])):
            main()

        mock_logger.success.assert_called_once()

    def test_failed_job_exits_nonzero(self, mock_logger, _setup, monkeypatch: pytest.MonkeyPatch) -> None:
        job = Job(archive_path=Path("a.7z"), state=Error("download error: boom"))
        monkeypatch.setattr("sys.argv", ["stackdump"])

        with patch("stackdump.ingest.__main__.run_ingest", new=AsyncMock(return_value=[job])):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 1

    def test_bad_manifest_exits_before_work(self, mock_logger, _setup, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.argv", ["stackdump", "--site-list", "site.list"])
        failing = AsyncMock(side_effect=ManifestError("Manifest not found: site.list"))

        with patch("stackdump.ingest.__main__.run_ingest", new=failing):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 2
        assert failing.await_args.kwargs["overrides"] == {"site_list": "site.list"}

    def test_keyboard_interrupt(self, mock_logger, _setup, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.argv", ["stackdump"])

        with patch("stackdump.ingest.__main__.run_ingest", new=AsyncMock(side_effect=KeyboardInterrupt)):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 1
        mock_logger.warning.assert_called_once_with("Interrupted by user")


@patch("stackdump.query.__main__.setup_logging")
@patch("stackdump.query.__main__.logger")
class TestQueryMain:
    """Tests for the query entry point."""

    def test_limit_zero_reads_all(self, mock_logger, _setup, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.argv", ["stackdump-query", "acme_Post", "--limit", "0"])
        run = AsyncMock()

        with patch("stackdump.query.__main__.run_query", new=run):
            query_cli.main()

        assert run.await_args.args == ("acme_Post", None)

    @pytest.mark.parametrize(
        "error",
        [
            StoreError("No table named acme_Post"),
            RecordDecodeError("Invalid Comment record (@Text: Field required)"),
            CodecError("Row has 2 values for 3 columns"),
        ],
    )
    def test_read_errors_exit_nonzero(
        self, mock_logger, _setup, error: Exception, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr("sys.argv", ["stackdump-query", "acme_Post"])

        with patch("stackdump.query.__main__.run_query", new=AsyncMock(side_effect=error)):
            with pytest.raises(SystemExit) as exc_info:
                query_cli.main()

        assert exc_info.value.code == 1
        mock_logger.error.assert_called_once_with(str(error))
