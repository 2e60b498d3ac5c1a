"""Post history record (PostHistory.xml).

One row per revision event of a post. Several rows produced by a single
action (e.g. an edit touching title, body and tags) share one RevisionGUID.
"""

from datetime import datetime

from pydantic import Field

from stackdump.db.records.base import SourceRecord


class PostHistory(SourceRecord):
    """A single revision event of a post."""

    id: int

    # Kept as a plain integer: new history types appear regularly.
    # 1-3 initial title/body/tags, 4-6 edits, 7-9 rollbacks,
    # 10-15 close/reopen/delete/undelete/lock/unlock, 16+ misc events.
    post_history_type_id: int

    post_id: int

    # Source spelling is all-caps, so the column becomes "revision_g_u_i_d"
    revision_guid: str = Field(alias="@RevisionGUID")

    creation_date: datetime
    user_id: int | None = None

    # Populated if the user has been removed and is no longer referenced by id
    user_display_name: str | None = None

    # Comment left by the editor
    comment: str | None = None

    # Raw new value for the revision. For close/reopen/delete events
    # (types 10-15) a JSON list of voters; for migrations "from <url>" or
    # "to <url>".
    text: str | None = None

    content_license: str | None = None
