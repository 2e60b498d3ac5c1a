"""Rich output for table read-back."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from stackdump.db.records import AttributeRecord
from stackdump.utils.pipeline_logger import BasePipelineLogger


def record_fields(record: Any) -> list[tuple[str, Any]]:
    """Present (name, value) pairs of a decoded record, in field order."""
    if isinstance(record, BaseModel):
        return [
            (name, value)
            for name, value in record.model_dump().items()
            if value is not None
        ]
    if isinstance(record, AttributeRecord):
        return list(record.fields)
    return list(vars(record).items())


class QueryLogger(BasePipelineLogger):
    """Logger for the query CLI."""

    def __init__(self) -> None:
        super().__init__(__name__)

    def record(self, table_name: str, record: Any) -> None:
        """Print one decoded record as a structured block."""
        title = f"{table_name} [dim]{type(record).__name__}[/dim]"
        with self.block(title) as block:
            for name, value in record_fields(record):
                block.field(name, value)

    def summary(
        self,
        table: str = "",
        records: int = 0,
        elapsed: float = 0.0,
        **kwargs: Any,
    ) -> None:
        """Print final query summary."""
        self.print_summary(
            "Query",
            elapsed=elapsed,
            stats={"Table": table, "Records": records},
            style="green",
        )


# Global logger instance
logger = QueryLogger()
