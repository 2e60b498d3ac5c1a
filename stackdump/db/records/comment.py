"""Comment record (Comments.xml)."""

from datetime import datetime

from stackdump.db.records.base import SourceRecord


class Comment(SourceRecord):
    """A comment left on a post."""

    id: int
    post_id: int
    score: int
    text: str
    creation_date: datetime

    # Populated if the user has been removed and is no longer referenced by id
    user_display_name: str | None = None
    user_id: int | None = None

    content_license: str | None = None
