"""User record (Users.xml).

Users are site-local: the same person has one row per site, linked across
the network only through AccountId.
"""

from datetime import datetime

from stackdump.db.records.base import SourceRecord


class User(SourceRecord):
    """A site user profile."""

    id: int
    reputation: int
    creation_date: datetime
    display_name: str

    # Removed from recent dumps, still present in old ones
    email_hash: str | None = None

    profile_image_url: str | None = None
    last_access_date: datetime
    website_url: str | None = None
    location: str | None = None
    age: int | None = None
    about_me: str | None = None
    views: int
    up_votes: int
    down_votes: int

    # Network-wide account id
    account_id: int | None = None
