"""Base orchestrator for pipeline execution.

Provides common infrastructure for the ingest and query orchestrators:
- Database engine and the shared StoreWriter
- Store initialization
- Timing and the common run() interface

Usage:
    class MyOrchestrator(BaseOrchestrator):
        async def _run_pipeline(self):
            # Implementation
            pass

        def _log_summary(self, elapsed):
            # Log final statistics
            pass
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy.engine import make_url

from stackdump.db.engine import get_engine
from stackdump.db.writer import StoreWriter

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine


log = logging.getLogger(__name__)


class BaseOrchestrator(ABC):
    """Abstract base class for pipeline orchestrators.

    Provides:
    - Database engine (cached per URL) and the StoreWriter owning the
      write token
    - Store initialization
    - Timing infrastructure

    Subclasses must implement:
    - _run_pipeline(): The actual pipeline logic
    - _log_summary(): Log final statistics
    """

    def __init__(self, database_url: str) -> None:
        """Initialize the orchestrator.

        Args:
            database_url: Database connection URL.
        """
        self.database_url = database_url
        self.engine: AsyncEngine = get_engine(database_url)
        self.writer = StoreWriter(self.engine)
        self.start_time: float = 0.0

    async def init_db(self) -> None:
        """Open the store, creating the SQLite file's directory if needed.

        Tables are not created here: each one is created by the transaction
        that loads it.
        """
        url = make_url(self.database_url)
        if url.get_backend_name() == "sqlite" and url.database not in (None, "", ":memory:"):
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)

        journal_mode = await self.writer.journal_mode()
        log.debug(f"Store {url.database} opened (journal_mode={journal_mode})")

    async def run(self) -> None:
        """Run the pipeline."""
        self.start_time = time.time()

        await self.init_db()
        await self._run_pipeline()

        elapsed = time.time() - self.start_time
        self._log_summary(elapsed)

    @abstractmethod
    async def _run_pipeline(self) -> None:
        """Execute the pipeline logic."""
        ...

    @abstractmethod
    def _log_summary(self, elapsed: float) -> None:
        """Log the final summary statistics.

        Args:
            elapsed: Total time elapsed in seconds.
        """
        ...
