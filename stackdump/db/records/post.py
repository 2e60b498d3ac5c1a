"""Post record (Posts.xml).

Questions, answers and the various wiki/placeholder post kinds all live in
the same file, discriminated by PostTypeId. Most columns are only populated
for some post types, hence the many optional fields.
"""

from datetime import datetime
from enum import IntEnum
from typing import Annotated

from pydantic import BeforeValidator

from stackdump.db.records.base import SourceRecord, coerce_discriminant


class PostType(IntEnum):
    QUESTION = 1
    ANSWER = 2
    WIKI = 3
    TAG_WIKI_EXCERPT = 4
    TAG_WIKI = 5
    MODERATOR_NOMINATION = 6
    WIKI_PLACEHOLDER = 7
    PRIVILEGE_WIKI = 8


class Post(SourceRecord):
    """A question, answer or wiki post."""

    id: int
    post_type_id: Annotated[PostType, BeforeValidator(coerce_discriminant)]

    # Only present for answers
    parent_id: int | None = None

    # Only present for questions
    accepted_answer_id: int | None = None

    creation_date: datetime
    deletion_date: datetime | None = None
    score: int
    view_count: int | None = None
    body: str

    owner_user_id: int | None = None

    # Populated if the owner has been removed or posted anonymously
    owner_display_name: str | None = None

    last_editor_user_id: int | None = None
    last_editor_display_name: str | None = None
    last_edit_date: datetime | None = None
    last_activity_date: datetime

    # Questions only
    title: str | None = None
    tags: str | None = None
    answer_count: int | None = None

    comment_count: int
    favorite_count: int | None = None

    # Populated if the post is closed
    closed_date: datetime | None = None

    # Populated if the post is community wikied
    community_owned_date: datetime | None = None

    content_license: str | None = None
