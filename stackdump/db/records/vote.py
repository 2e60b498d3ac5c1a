"""Vote record (Votes.xml)."""

from datetime import datetime
from enum import IntEnum
from typing import Annotated

from pydantic import BeforeValidator

from stackdump.db.records.base import SourceRecord, coerce_discriminant


class VoteType(IntEnum):
    ACCEPTED_BY_ORIGINATOR = 1
    UP_MOD = 2
    DOWN_MOD = 3
    OFFENSIVE = 4
    FAVORITE = 5
    CLOSE = 6
    REOPEN = 7
    BOUNTY_START = 8
    BOUNTY_CLOSE = 9
    DELETION = 10
    UNDELETION = 11
    SPAM = 12
    INFORM_MODERATOR = 13
    MODERATOR_REVIEW = 15
    APPROVE_EDIT_SUGGESTION = 16


class Vote(SourceRecord):
    """A vote cast on a post. Voter identity is only kept where public."""

    id: int
    post_id: int
    vote_type_id: Annotated[VoteType, BeforeValidator(coerce_discriminant)]
    creation_date: datetime

    # Only for favorites (VoteTypeId 5)
    user_id: int | None = None

    # Only for bounty votes (VoteTypeId 8 and 9)
    bounty_amount: int | None = None
