"""Post link record (PostLinks.xml)."""

from datetime import datetime
from enum import IntEnum
from typing import Annotated

from pydantic import BeforeValidator

from stackdump.db.records.base import SourceRecord, coerce_discriminant


class LinkType(IntEnum):
    LINKED = 1
    DUPLICATE = 3


class PostLink(SourceRecord):
    """A link between two posts (related or duplicate)."""

    id: int
    creation_date: datetime
    post_id: int
    related_post_id: int
    link_type_id: Annotated[LinkType, BeforeValidator(coerce_discriminant)]
