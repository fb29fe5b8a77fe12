"""Test configuration and fixtures."""

from datetime import datetime, timezone
from uuid import uuid4

import logfire

from taigi.domain.model import Definition, Vote
from taigi.domain.value import DefinitionId, UserId, VoteId, VoteType

# Keep spans local during tests
logfire.configure(send_to_logfire=False, console=False)


def make_definition(
    author_id: UserId | None = None, definition_id: DefinitionId | None = None
) -> Definition:
    """Build a community definition for tests."""
    return Definition(
        id=definition_id or DefinitionId(uuid4()),
        word_id="tsiah-png",
        user_id=author_id or UserId(uuid4()),
        definition="To have a meal; literally to eat rice.",
        usage_example="Lí tsia̍h-pá buē?",
        tags=["daily-life"],
    )


def make_vote(
    definition_id: DefinitionId,
    user_id: UserId,
    vote_type: VoteType = VoteType.UPVOTE,
    created_at: datetime | None = None,
) -> Vote:
    """Build a vote record for tests."""
    return Vote(
        id=VoteId(uuid4()),
        definition_id=definition_id,
        user_id=user_id,
        vote_type=vote_type,
        created_at=created_at or datetime.now(timezone.utc),
    )
