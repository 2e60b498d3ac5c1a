"""Tag record (Tags.xml)."""

from stackdump.db.records.base import SourceRecord


class Tag(SourceRecord):
    id: int
    tag_name: str
    count: int

    # Set once a tag excerpt / tag wiki has been written
    excerpt_post_id: int | None = None
    wiki_post_id: int | None = None
