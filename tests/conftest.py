"""Shared fixtures for stackdump tests."""

from __future__ import annotations

from pathlib import Path
from xml.sax.saxutils import quoteattr

import pytest
import pytest_asyncio

from stackdump.db.engine import build_engine, sqlite_url
from stackdump.db.writer import StoreWriter


def write_dump(path: Path, rows: list[dict[str, str]], root: str = "rows") -> Path:
    """Write a dump file: one self-closing <row> per dict, attributes in order."""
    lines = ['<?xml version="1.0" encoding="utf-8"?>', f"<{root}>"]
    for row in rows:
        attributes = " ".join(f"{key}={quoteattr(value)}" for key, value in row.items())
        lines.append(f"  <row {attributes} />")
    lines.append(f"</{root}>")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines), encoding="utf-8")
    return path


# One or two valid rows per entity file
SAMPLE_ROWS: dict[str, list[dict[str, str]]] = {
    "Badges.xml": [
        {
            "Id": "1",
            "UserId": "2",
            "Name": "Autobiographer",
            "Date": "2013-12-10T19:00:42.217",
            "Class": "3",
            "TagBased": "False",
        },
    ],
    "Comments.xml": [
        {
            "Id": "1",
            "PostId": "1",
            "Score": "2",
            "Text": "Could you clarify?",
            "CreationDate": "2013-12-10T20:08:16.863",
            "UserId": "5",
            "ContentLicense": "CC BY-SA 3.0",
        },
    ],
    "PostHistory.xml": [
        {
            "Id": "1",
            "PostHistoryTypeId": "2",
            "PostId": "1",
            "RevisionGUID": "9b2a5c2e-1f0b-4a44-8f62-0e4cbe0a4b2e",
            "CreationDate": "2013-12-10T19:53:34.450",
            "UserId": "5",
            "Text": "How do I run a relay?",
            "ContentLicense": "CC BY-SA 3.0",
        },
    ],
    "PostLinks.xml": [
        {
            "Id": "19",
            "CreationDate": "2013-12-11T00:21:32.917",
            "PostId": "4",
            "RelatedPostId": "1",
            "LinkTypeId": "1",
        },
    ],
    "Posts.xml": [
        {
            "Id": "1",
            "PostTypeId": "1",
            "AcceptedAnswerId": "2",
            "CreationDate": "2013-12-10T19:53:34.450",
            "Score": "10",
            "ViewCount": "402",
            "Body": "<p>How do I run a relay?</p>",
            "OwnerUserId": "5",
            "LastActivityDate": "2013-12-11T09:05:01.883",
            "Title": "Running a relay",
            "Tags": "<relays>",
            "AnswerCount": "1",
            "CommentCount": "1",
        },
        {
            "Id": "2",
            "PostTypeId": "2",
            "ParentId": "1",
            "CreationDate": "2013-12-10T20:01:12.100",
            "Score": "7",
            "Body": "<p>Install tor.</p>",
            "OwnerUserId": "6",
            "LastActivityDate": "2013-12-10T20:01:12.100",
            "CommentCount": "0",
        },
    ],
    "Tags.xml": [
        {"Id": "1", "TagName": "relays", "Count": "125", "ExcerptPostId": "64"},
    ],
    "Users.xml": [
        {
            "Id": "-1",
            "Reputation": "1",
            "CreationDate": "2013-12-10T17:10:32.187",
            "DisplayName": "Community",
            "LastAccessDate": "2013-12-10T17:10:32.187",
            "Location": "on the server farm",
            "Views": "0",
            "UpVotes": "18",
            "DownVotes": "4",
            "AccountId": "-1",
        },
    ],
    "Votes.xml": [
        {"Id": "1", "PostId": "1", "VoteTypeId": "2", "CreationDate": "2013-12-10T00:00:00.000"},
        {
            "Id": "2",
            "PostId": "1",
            "VoteTypeId": "8",
            "UserId": "7",
            "BountyAmount": "50",
            "CreationDate": "2013-12-12T00:00:00.000",
        },
    ],
}


def write_site(directory: Path, rows: dict[str, list[dict[str, str]]] | None = None) -> Path:
    """Write every entity file of an extracted dump into ``directory``."""
    for file_name, file_rows in (rows or SAMPLE_ROWS).items():
        write_dump(directory / file_name, file_rows)
    return directory


@pytest.fixture
def site_dir(tmp_path: Path) -> Path:
    """An extracted dump for site "tor.stackexchange"."""
    return write_site(tmp_path / "tor.stackexchange.com")


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    return sqlite_url(tmp_path / "store.db")


@pytest_asyncio.fixture
async def writer(database_url: str):
    """StoreWriter over a fresh SQLite file."""
    engine = build_engine(database_url)
    try:
        yield StoreWriter(engine)
    finally:
        await engine.dispose()
