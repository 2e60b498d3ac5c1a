"""Base classes for dump records.

Every record type is an ordered schema descriptor: it exposes its source
attribute identifiers and values in declaration order, which is the order the
codec turns into columns and bindings.

Attribute identifiers are derived from the Python field names
(``user_id`` -> ``@UserId``); a field whose source spelling does not follow
that rule declares an explicit alias.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, Iterable

from pydantic import BaseModel, ConfigDict, ValidationError

from stackdump.db.codec import to_pascal_case

if TYPE_CHECKING:
    from typing import Self


class RecordDecodeError(Exception):
    """Raised when source attributes or a stored row cannot form a record."""


def coerce_discriminant(value: Any) -> Any:
    """Accept enum discriminants given as integers or numeric strings."""
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.lstrip("-").isdigit():
            return int(stripped)
    return value


def _first_error(exc: ValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error.get("loc", ()))
    return f"{location}: {error.get('msg', 'invalid value')}"


class SourceRecord(BaseModel):
    """Typed record parsed from one attribute row of a dump file."""

    model_config = ConfigDict(
        alias_generator=to_pascal_case,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    # Source attribute identifiers in declaration order (set per subclass)
    attribute_names: ClassVar[tuple[str, ...]] = ()

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)
        cls.attribute_names = tuple(
            field.alias or to_pascal_case(name)
            for name, field in cls.model_fields.items()
        )

    @classmethod
    def from_fields(cls, fields: Iterable[tuple[str, Any]]) -> "Self":
        """Build a record from ``(attribute_name, value)`` pairs."""
        try:
            return cls.model_validate(dict(fields))
        except ValidationError as e:
            raise RecordDecodeError(
                f"Invalid {cls.__name__} record ({_first_error(e)})"
            ) from e

    def field_names(self) -> list[str]:
        return list(self.attribute_names)

    def field_values(self) -> list[Any]:
        return [getattr(self, name) for name in type(self).model_fields]

    def field_types(self) -> list[Any]:
        return [field.annotation for field in type(self).model_fields.values()]


@dataclass(frozen=True)
class AttributeRecord:
    """Untyped attribute row: names and raw values exactly as read.

    Used for tables whose entity kind is unknown; every present value is
    kept as-is and every column of a generated table is TEXT.
    """

    fields: tuple[tuple[str, Any], ...]

    @classmethod
    def from_fields(cls, fields: Iterable[tuple[str, Any]]) -> "AttributeRecord":
        return cls(tuple(fields))

    def field_names(self) -> list[str]:
        return [name for name, _ in self.fields]

    def field_values(self) -> list[Any]:
        return [value for _, value in self.fields]
