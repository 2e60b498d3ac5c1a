"""Badge record (Badges.xml)."""

from datetime import datetime
from enum import IntEnum
from typing import Annotated

from pydantic import BeforeValidator, Field

from stackdump.db.records.base import SourceRecord, coerce_discriminant


class BadgeClass(IntEnum):
    GOLD = 1
    SILVER = 2
    BRONZE = 3


class Badge(SourceRecord):
    """A badge awarded to a user."""

    id: int
    user_id: int
    name: str
    date: datetime

    # "class" is a keyword, hence the explicit alias
    badge_class: Annotated[BadgeClass, BeforeValidator(coerce_discriminant)] = Field(
        alias="@Class"
    )

    # True if the badge is awarded for a tag rather than a named achievement
    tag_based: bool
