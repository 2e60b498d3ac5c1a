"""Generic record <-> relational codec.

Turns any record implementing the schema descriptor protocol into:
- a CREATE TABLE statement and a parameterized INSERT statement
- the ordered list of values to bind positionally to that INSERT

and turns stored rows back into typed records.

Field order is part of the contract: every operation walks the record's
fields in declaration order and never looks a field up by name. Columns are
bound by position, so a record whose field sequence differs from the one the
table was created from is rejected instead of being silently mis-bound.

Usage:
    from stackdump.db.codec import RowBinder, infer_schema

    schema = infer_schema(first_record, "acme_Post")
    binder = RowBinder(schema)
    rows = [binder.bind(record) for record in records]
"""

from __future__ import annotations

import types
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import (
    Annotated,
    Any,
    Iterable,
    Protocol,
    Sequence,
    TypeVar,
    Union,
    get_args,
    get_origin,
    runtime_checkable,
)

from stackdump.utils.time import format_timestamp


# Source attribute identifiers are spelled "@PascalCase"
ATTRIBUTE_PREFIX = "@"

PRIMARY_KEY_COLUMN = "id"

SqlValue = Union[int, float, str, None]


class CodecError(Exception):
    """Raised when a record cannot be mapped to or from relational values."""


class SchemaMismatchError(CodecError):
    """Raised when a record does not match the schema captured for its stream."""


class SqlType(str, Enum):
    """Column storage classes used by generated tables."""

    INTEGER = "INTEGER"
    REAL = "REAL"
    TEXT = "TEXT"


@runtime_checkable
class SchemaDescriptor(Protocol):
    """A record that can describe itself as an ordered field sequence.

    Records may additionally expose ``field_types()`` (declared Python types,
    same order) so that a column whose first value is absent still gets a
    meaningful type.
    """

    def field_names(self) -> list[str]: ...

    def field_values(self) -> list[Any]: ...


class DecodableRecord(Protocol):
    """A record type that can be rebuilt from ``(attribute_name, value)`` pairs."""

    @classmethod
    def from_fields(cls, fields: Iterable[tuple[str, Any]]) -> Any: ...


R = TypeVar("R")


# -------------------------------------------------------------------------
# Column naming
# -------------------------------------------------------------------------


def to_snake_case(name: str) -> str:
    """Convert a source attribute identifier to a column name.

    "@UserId" -> "user_id". Every capital letter is lowered and, except for
    the first one, preceded by an underscore ("@RevisionGUID" ->
    "revision_g_u_i_d"), which keeps the mapping reversible.
    """
    parts: list[str] = []
    first = True
    for char in name:
        if char == ATTRIBUTE_PREFIX:
            continue
        if char.isascii() and char.isupper():
            if not first:
                parts.append("_")
            first = False
            parts.append(char.lower())
        else:
            parts.append(char)
    return "".join(parts)


def to_pascal_case(column_name: str) -> str:
    """Convert a column name back to its source attribute identifier.

    "user_id" -> "@UserId"
    """
    words = column_name.split("_")
    return ATTRIBUTE_PREFIX + "".join(word[:1].upper() + word[1:] for word in words)


def quote_identifier(name: str) -> str:
    """Quote a table or column name for SQLite."""
    return '"' + name.replace('"', '""') + '"'


# -------------------------------------------------------------------------
# Values and types
# -------------------------------------------------------------------------


def sql_type_of(value: Any) -> SqlType | None:
    """Storage class for a present value, or None for an absent one."""
    if value is None:
        return None
    if isinstance(value, Enum):
        return sql_type_of(value.value)
    if isinstance(value, bool):
        return SqlType.TEXT
    if isinstance(value, int):
        return SqlType.INTEGER
    if isinstance(value, float):
        return SqlType.REAL
    if isinstance(value, (str, datetime)):
        return SqlType.TEXT
    raise CodecError(f"Unsupported value type: {type(value).__name__}")


def sql_type_for_annotation(annotation: Any) -> SqlType:
    """Storage class for a declared field type (used when the value is absent)."""
    origin = get_origin(annotation)
    if origin is Annotated:
        return sql_type_for_annotation(get_args(annotation)[0])
    if origin is Union or origin is types.UnionType:
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return sql_type_for_annotation(members[0])
        return SqlType.TEXT

    if isinstance(annotation, type):
        if issubclass(annotation, bool):
            return SqlType.TEXT
        if issubclass(annotation, Enum):
            return SqlType.INTEGER if issubclass(annotation, int) else SqlType.TEXT
        if issubclass(annotation, int):
            return SqlType.INTEGER
        if issubclass(annotation, float):
            return SqlType.REAL
    return SqlType.TEXT


def to_sql_value(value: Any) -> SqlValue:
    """Convert a record value to the value bound to the INSERT.

    Enums bind their integral discriminant, booleans the text "true"/"false",
    timestamps ISO-8601 text. Absent values bind a real NULL.
    """
    if value is None:
        return None
    if isinstance(value, Enum):
        return to_sql_value(value.value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return int(value)
    if isinstance(value, (float, str)):
        return value
    if isinstance(value, datetime):
        return format_timestamp(value)
    raise CodecError(f"Unsupported value type: {type(value).__name__}")


# -------------------------------------------------------------------------
# Schema
# -------------------------------------------------------------------------


@dataclass(frozen=True)
class Column:
    """One generated column."""

    name: str
    sql_type: SqlType

    @property
    def is_primary_key(self) -> bool:
        return self.name == PRIMARY_KEY_COLUMN

    def definition(self) -> str:
        if self.is_primary_key:
            return f"{quote_identifier(self.name)} INTEGER PRIMARY KEY UNIQUE"
        return f"{quote_identifier(self.name)} {self.sql_type.value}"


@dataclass(frozen=True)
class TableSchema:
    """Ordered column list derived from the first record of a stream."""

    table_name: str
    columns: tuple[Column, ...]

    @property
    def column_names(self) -> tuple[str, ...]:
        return tuple(column.name for column in self.columns)

    @property
    def create_statement(self) -> str:
        definitions = ", ".join(column.definition() for column in self.columns)
        return (
            f"CREATE TABLE IF NOT EXISTS {quote_identifier(self.table_name)} "
            f"({definitions})"
        )

    @property
    def insert_statement(self) -> str:
        names = ", ".join(quote_identifier(name) for name in self.column_names)
        placeholders = ", ".join("?" for _ in self.columns)
        return (
            f"INSERT INTO {quote_identifier(self.table_name)} ({names}) "
            f"VALUES ({placeholders})"
        )


def _declared_types(record: SchemaDescriptor, count: int) -> list[Any]:
    field_types = getattr(record, "field_types", None)
    if field_types is None:
        return [None] * count
    declared = list(field_types())
    if len(declared) != count:
        raise CodecError(
            f"{type(record).__name__} declares {len(declared)} types "
            f"for {count} fields"
        )
    return declared


def infer_schema(record: SchemaDescriptor, table_name: str) -> TableSchema:
    """Derive the table schema from one record instance."""
    names = record.field_names()
    values = record.field_values()
    if len(names) != len(values):
        raise CodecError(
            f"{type(record).__name__} has {len(names)} names "
            f"but {len(values)} values"
        )
    if not names:
        raise CodecError(f"{type(record).__name__} has no fields")

    columns: list[Column] = []
    seen: set[str] = set()
    for name, value, declared in zip(names, values, _declared_types(record, len(names))):
        column_name = to_snake_case(name)
        if column_name in seen:
            raise CodecError(f"Duplicate column {column_name!r} in {table_name}")
        seen.add(column_name)

        sql_type = sql_type_of(value)
        if sql_type is None:
            sql_type = (
                sql_type_for_annotation(declared)
                if declared is not None
                else SqlType.TEXT
            )
        columns.append(Column(column_name, sql_type))

    return TableSchema(table_name=table_name, columns=tuple(columns))


def encode_schema(record: SchemaDescriptor, table_name: str) -> tuple[str, str]:
    """Return ``(create_table_statement, parameterized_insert_statement)``."""
    schema = infer_schema(record, table_name)
    return schema.create_statement, schema.insert_statement


def encode_bindings(record: SchemaDescriptor) -> list[SqlValue]:
    """Return the values to bind positionally, in field declaration order."""
    return [to_sql_value(value) for value in record.field_values()]


class RowBinder:
    """Binds the records of one stream against the schema of its first record."""

    def __init__(self, schema: TableSchema) -> None:
        self.schema = schema
        self._field_names: tuple[str, ...] | None = None

    def _check_names(self, names: Sequence[str]) -> None:
        key = tuple(names)
        if key == self._field_names:
            return

        expected = len(self.schema.columns)
        if len(key) != expected:
            raise SchemaMismatchError(
                f"Record has {len(key)} fields, "
                f"{self.schema.table_name} expects {expected}"
            )
        if tuple(to_snake_case(name) for name in key) != self.schema.column_names:
            raise SchemaMismatchError(
                f"Record field order does not match {self.schema.table_name}"
            )
        if self._field_names is None:
            self._field_names = key

    def bind(self, record: SchemaDescriptor) -> tuple[SqlValue, ...]:
        """Return the binding tuple for ``record``."""
        self._check_names(record.field_names())
        values = encode_bindings(record)
        if len(values) != len(self.schema.columns):
            raise SchemaMismatchError(
                f"Record has {len(values)} values, "
                f"{self.schema.table_name} expects {len(self.schema.columns)}"
            )
        return tuple(values)


# -------------------------------------------------------------------------
# Decoding
# -------------------------------------------------------------------------


def decode_row(
    record_type: type[R],
    column_names: Sequence[str],
    row: Sequence[SqlValue],
) -> R:
    """Rebuild a typed record from a stored row.

    Columns are mapped back to source attribute identifiers with
    ``to_pascal_case``. SQL NULL means absent; any stored text, including
    "NULL", is a present value.
    """
    if len(column_names) != len(row):
        raise CodecError(
            f"Row has {len(row)} values for {len(column_names)} columns"
        )

    fields = [
        (to_pascal_case(column), value)
        for column, value in zip(column_names, row)
        if value is not None
    ]
    return record_type.from_fields(fields)  # type: ignore[attr-defined]
