"""The fixed list of entity kinds loaded from every dump.

Order matters: kinds are loaded in this order, and the weights drive the
coarse parse progress (Posts dominates every dump).
"""

from __future__ import annotations

from dataclasses import dataclass

from stackdump.db.records.badge import Badge
from stackdump.db.records.base import SourceRecord
from stackdump.db.records.comment import Comment
from stackdump.db.records.post import Post
from stackdump.db.records.post_history import PostHistory
from stackdump.db.records.post_link import PostLink
from stackdump.db.records.tag import Tag
from stackdump.db.records.user import User
from stackdump.db.records.vote import Vote


@dataclass(frozen=True)
class EntityKind:
    """One record category of a dump."""

    name: str
    file_name: str
    record_type: type[SourceRecord]
    weight: int

    def table_name(self, site: str) -> str:
        """Physical table name for this kind on ``site``."""
        return f"{site}_{self.name}"


ENTITY_KINDS: tuple[EntityKind, ...] = (
    EntityKind("Badge", "Badges.xml", Badge, weight=10),
    EntityKind("Comment", "Comments.xml", Comment, weight=10),
    EntityKind("PostHistory", "PostHistory.xml", PostHistory, weight=10),
    EntityKind("PostLink", "PostLinks.xml", PostLink, weight=10),
    EntityKind("Post", "Posts.xml", Post, weight=30),
    EntityKind("Tag", "Tags.xml", Tag, weight=10),
    EntityKind("User", "Users.xml", User, weight=10),
    EntityKind("Vote", "Votes.xml", Vote, weight=10),
)

_BY_NAME = {kind.name: kind for kind in ENTITY_KINDS}


def get_entity_kind(name: str) -> EntityKind | None:
    """Look up an entity kind by name ("Post"), or None if unknown."""
    return _BY_NAME.get(name)


def entity_kind_for_table(table_name: str) -> EntityKind | None:
    """Resolve the entity kind of a ``<site>_<EntityKind>`` table name."""
    _, sep, suffix = table_name.rpartition("_")
    if not sep:
        return None
    return get_entity_kind(suffix)
