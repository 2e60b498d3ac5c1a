"""Parse stage: load every entity file of an extracted dump into its table.

Entity kinds are loaded in their fixed order, each into
``<site>_<EntityKind>``. A table that already exists is complete (it only
becomes visible when its whole-file transaction commits) so its kind is
skipped without opening the source file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from stackdump.db.codec import RowBinder, SqlValue, infer_schema
from stackdump.db.records import ENTITY_KINDS, EntityKind, SourceRecord
from stackdump.db.writer import StoreWriter
from stackdump.ingest.jobs import Job, Parsing
from stackdump.ingest.logger import logger
from stackdump.ingest.reader import read_records
from stackdump.ingest.scheduler import Reporter, Stage


DEFAULT_BATCH_SIZE = 10_000


class MissingSourceFileError(Exception):
    """Raised when an entity file is absent and its table was never loaded."""


def site_name(extract_dir: Path) -> str:
    """Site prefix of table names: ``data/tor.stackexchange.com`` -> ``tor.stackexchange``."""
    return extract_dir.stem


class ParseStage(Stage):
    error_label = "parsing"

    def __init__(
        self,
        writer: StoreWriter,
        batch_size: int = DEFAULT_BATCH_SIZE,
        entity_kinds: Sequence[EntityKind] = ENTITY_KINDS,
    ) -> None:
        self.writer = writer
        self.batch_size = batch_size
        self.entity_kinds = tuple(entity_kinds)

    async def run(self, job: Job, report: Reporter) -> None:
        extract_dir = job.extract_dir
        site = site_name(extract_dir)
        total_weight = sum(kind.weight for kind in self.entity_kinds) or 1

        loaded_weight = 0
        for kind in self.entity_kinds:
            report(
                Parsing(
                    percent=loaded_weight * 100 // total_weight,
                    current_entity=kind.name,
                )
            )
            await self.load_entity(site, extract_dir, kind)
            loaded_weight += kind.weight

        report(Parsing(percent=100))

    async def load_entity(self, site: str, directory: Path, kind: EntityKind) -> int | None:
        """Load one entity file into its table.

        Returns:
            Number of rows inserted, or None if the table was already loaded
        """
        table_name = kind.table_name(site)
        if await self.writer.table_exists(table_name):
            logger.entity_skip(table_name, "already loaded")
            return None

        source = directory / kind.file_name
        if not source.is_file():
            raise MissingSourceFileError(f"{kind.file_name} not found in {directory}")

        count = await self.load_file(source, kind.record_type, table_name)
        logger.entity_loaded(table_name, count)
        return count

    async def load_file(
        self,
        source: Path,
        record_type: type[SourceRecord],
        table_name: str,
    ) -> int:
        """Stream ``source`` into ``table_name`` inside one transaction.

        The table is created from the first record; an empty file creates
        nothing.
        """
        async with self.writer.transaction() as tx:
            binder: RowBinder | None = None
            batch: list[tuple[SqlValue, ...]] = []

            for record in read_records(source, record_type):
                if binder is None:
                    schema = infer_schema(record, table_name)
                    await tx.execute(schema.create_statement)
                    binder = RowBinder(schema)

                batch.append(binder.bind(record))
                if len(batch) >= self.batch_size:
                    await tx.insert_many(binder.schema.insert_statement, batch)
                    batch = []

            if binder is not None and batch:
                await tx.insert_many(binder.schema.insert_statement, batch)

            return tx.rows_inserted
