"""Database engine configuration.

Provides centralized engine management for the SQLite store.

Every connection is switched to write-ahead logging, and the driver's own
implicit transaction handling is replaced by an explicit BEGIN, so that
CREATE TABLE takes part in the surrounding transaction: a table only becomes
visible once all of its rows are committed.

Usage:
    from stackdump.db.engine import get_engine, sqlite_url

    engine = get_engine(sqlite_url(Path("data/stackdump.db")))
    async with engine.begin() as conn:
        ...
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine


# Engine cache: database_url -> engine
_engine_cache: dict[str, AsyncEngine] = {}


def sqlite_url(path: str | Path) -> str:
    """Build an async SQLite URL for a database file."""
    return f"sqlite+aiosqlite:///{path}"


def _configure_sqlite(engine: AsyncEngine) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:
        # Stop the driver from issuing its own BEGIN (it skips DDL)
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")


def build_engine(database_url: str) -> AsyncEngine:
    """Create a new (uncached) async engine for ``database_url``."""
    engine = create_async_engine(database_url, echo=False)
    if engine.dialect.name == "sqlite":
        _configure_sqlite(engine)
    return engine


def get_engine(database_url: str) -> AsyncEngine:
    """Get or create an async database engine.

    Engines are cached by database_url to avoid creating multiple
    connection pools for the same database.
    """
    if database_url not in _engine_cache:
        _engine_cache[database_url] = build_engine(database_url)
    return _engine_cache[database_url]


async def dispose_engines() -> None:
    """Dispose all cached engines.

    Call this during application shutdown to properly close
    all database connections.
    """
    for engine in _engine_cache.values():
        await engine.dispose()
    _engine_cache.clear()
