"""Decode stored rows back into records.

Tables named ``<site>_<EntityKind>`` decode into that kind's typed record;
any other table decodes into untyped AttributeRecords.
"""

from __future__ import annotations

from typing import Any

from stackdump.core import BaseOrchestrator
from stackdump.db.codec import decode_row
from stackdump.db.records import AttributeRecord, entity_kind_for_table
from stackdump.db.writer import StoreError, StoreWriter
from stackdump.query.logger import logger


def record_type_for_table(table_name: str) -> type[Any]:
    kind = entity_kind_for_table(table_name)
    return kind.record_type if kind is not None else AttributeRecord


async def read_table(
    writer: StoreWriter, table_name: str, limit: int | None = None
) -> list[Any]:
    """Read up to ``limit`` rows of ``table_name`` as records.

    Raises:
        StoreError: If the table does not exist or cannot be read
    """
    if not await writer.table_exists(table_name):
        raise StoreError(f"No table named {table_name}")

    columns, rows = await writer.fetch_rows(table_name, limit)
    record_type = record_type_for_table(table_name)
    return [decode_row(record_type, columns, row) for row in rows]


class QueryOrchestrator(BaseOrchestrator):
    """Prints the records of one table."""

    def __init__(self, database_url: str, table_name: str, limit: int | None = None) -> None:
        super().__init__(database_url)
        self.table_name = table_name
        self.limit = limit
        self.records: list[Any] = []

    async def _run_pipeline(self) -> None:
        self.records = await read_table(self.writer, self.table_name, self.limit)
        for record in self.records:
            logger.record(self.table_name, record)

    def _log_summary(self, elapsed: float) -> None:
        logger.summary(
            table=self.table_name,
            records=len(self.records),
            elapsed=elapsed,
        )
