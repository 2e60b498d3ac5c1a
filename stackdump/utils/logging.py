"""Logging setup for the stackdump CLIs.

Everything rich draws (log records, the live job board, summary panels and
query output) goes through the one shared ``console``, so log lines never
tear the live display.
"""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler


console = Console()

# Libraries that are chatty at INFO/DEBUG
THIRD_PARTY_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine", "aiosqlite", "py7zr")


def setup_logging(
    level: int = logging.INFO,
    log_file: str | Path | None = None,
    debug_third_party: bool = False,
) -> None:
    """Configure logging with RichHandler using the shared console.

    Call once at application startup (CLI main), never at import time.

    Args:
        level: Logging level for the root logger (default: INFO)
        log_file: Optional path to a log file for persistent logging
        debug_third_party: If True, let httpx/sqlalchemy/aiosqlite log at DEBUG
    """
    handlers: list[logging.Handler] = [
        RichHandler(
            console=console,
            show_path=False,
            rich_tracebacks=True,
            tracebacks_show_locals=False,
        )
    ]

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        handlers=handlers,
        format="%(message)s",
        force=True,
    )

    third_party_level = logging.DEBUG if debug_third_party else logging.WARNING
    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)
    if debug_third_party:
        # DEBUG on the engine logger also dumps every result row
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
