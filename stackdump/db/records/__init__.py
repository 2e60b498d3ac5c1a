"""Dump record types.

One typed record per entity kind, each an ordered schema descriptor that
the codec turns into a table.
"""

from stackdump.db.records.badge import Badge, BadgeClass
from stackdump.db.records.base import (
    AttributeRecord,
    RecordDecodeError,
    SourceRecord,
)
from stackdump.db.records.comment import Comment
from stackdump.db.records.entity_kinds import (
    ENTITY_KINDS,
    EntityKind,
    entity_kind_for_table,
    get_entity_kind,
)
from stackdump.db.records.post import Post, PostType
from stackdump.db.records.post_history import PostHistory
from stackdump.db.records.post_link import LinkType, PostLink
from stackdump.db.records.tag import Tag
from stackdump.db.records.user import User
from stackdump.db.records.vote import Vote, VoteType

__all__ = [
    "ENTITY_KINDS",
    "AttributeRecord",
    "Badge",
    "BadgeClass",
    "Comment",
    "EntityKind",
    "LinkType",
    "Post",
    "PostHistory",
    "PostLink",
    "PostType",
    "RecordDecodeError",
    "SourceRecord",
    "Tag",
    "User",
    "Vote",
    "VoteType",
    "entity_kind_for_table",
    "get_entity_kind",
]
