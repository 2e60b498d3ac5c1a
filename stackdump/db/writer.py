"""Single write path to the relational store.

All DDL, inserts and existence checks of every concurrently running job go
through one StoreWriter, which serializes them behind its write token (an
asyncio.Lock). The token is held for one statement, or for one whole-file
transaction.

Usage:
    writer = StoreWriter(engine)

    if not await writer.table_exists("acme_Post"):
        async with writer.transaction() as tx:
            await tx.execute(schema.create_statement)
            await tx.insert_many(schema.insert_statement, rows)
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Sequence

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from stackdump.db.codec import SqlValue, quote_identifier


class StoreError(Exception):
    """Raised when the store cannot be opened or a statement fails."""


def _has_table(sync_conn: Any, table_name: str) -> bool:
    return inspect(sync_conn).has_table(table_name)


def _table_names(sync_conn: Any) -> list[str]:
    return inspect(sync_conn).get_table_names()


class WriteTransaction:
    """Statements executed inside one StoreWriter transaction."""

    def __init__(self, connection: AsyncConnection) -> None:
        self._connection = connection
        self.rows_inserted = 0

    async def execute(self, statement: str) -> None:
        """Execute a statement without parameters (DDL)."""
        await self._connection.exec_driver_sql(statement)

    async def insert_many(
        self, statement: str, rows: Sequence[Sequence[SqlValue]]
    ) -> int:
        """Execute a prepared INSERT once per row, binding values by position.

        Returns:
            Number of rows inserted
        """
        if not rows:
            return 0
        await self._connection.exec_driver_sql(
            statement, [tuple(row) for row in rows]
        )
        self.rows_inserted += len(rows)
        return len(rows)


class StoreWriter:
    """Owns the write token and every access to the store."""

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self._token = asyncio.Lock()

    async def journal_mode(self) -> str:
        """Return the journal mode of the store (opens it if needed)."""
        async with self._token:
            try:
                async with self.engine.connect() as conn:
                    result = await conn.exec_driver_sql("PRAGMA journal_mode")
                    return str(result.scalar())
            except SQLAlchemyError as e:
                raise StoreError(f"Cannot open store: {e}") from e

    async def table_exists(self, table_name: str) -> bool:
        """Check whether ``table_name`` exists (fully loaded marker)."""
        async with self._token:
            try:
                async with self.engine.connect() as conn:
                    return await conn.run_sync(_has_table, table_name)
            except SQLAlchemyError as e:
                raise StoreError(f"Existence check for {table_name} failed: {e}") from e

    async def table_names(self) -> list[str]:
        """List every table in the store."""
        async with self._token:
            try:
                async with self.engine.connect() as conn:
                    return await conn.run_sync(_table_names)
            except SQLAlchemyError as e:
                raise StoreError(f"Cannot list tables: {e}") from e

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[WriteTransaction]:
        """Hold the write token for one transaction.

        Commits when the block exits normally, rolls back otherwise.
        """
        async with self._token:
            try:
                async with self.engine.begin() as conn:
                    yield WriteTransaction(conn)
            except SQLAlchemyError as e:
                raise StoreError(f"Write failed: {e}") from e

    async def fetch_rows(
        self, table_name: str, limit: int | None = None
    ) -> tuple[list[str], list[tuple[SqlValue, ...]]]:
        """Read rows back from a table.

        Returns:
            (column_names, rows), rows in rowid order
        """
        statement = f"SELECT * FROM {quote_identifier(table_name)}"
        if limit is not None:
            statement += f" LIMIT {int(limit)}"

        async with self._token:
            try:
                async with self.engine.connect() as conn:
                    result = await conn.exec_driver_sql(statement)
                    columns = list(result.keys())
                    rows = [tuple(row) for row in result.all()]
            except SQLAlchemyError as e:
                raise StoreError(f"Cannot read {table_name}: {e}") from e
        return columns, rows
