"""In-memory vote repository for testing."""

from datetime import datetime
from typing import Optional, Sequence
from uuid import uuid4

from taigi.domain.model import RealtimeVoteEvent, Vote, VoteAggregate
from taigi.domain.model.vote import utc_now
from taigi.domain.repository.vote import VoteRepository
from taigi.domain.service.realtime import VoteChannel, announce_write
from taigi.domain.value import DefinitionId, UserId, VoteEventType, VoteId, VoteType


class InMemoryVoteRepository(VoteRepository):
    """In-memory implementation of VoteRepository for testing.

    Behaves like the database table: one row per (definition, user), the
    row id survives a change of vote type.
    """

    def __init__(self, channel: Optional[VoteChannel] = None) -> None:
        self._votes: dict[tuple[DefinitionId, UserId], Vote] = {}
        self.channel = channel

    async def upsert_vote(
        self, definition_id: DefinitionId, user_id: UserId, vote_type: VoteType
    ) -> Vote:
        """Insert a vote or switch its type."""
        previous = self._votes.get((definition_id, user_id))
        vote = Vote(
            id=previous.id if previous else VoteId(uuid4()),
            definition_id=definition_id,
            user_id=user_id,
            vote_type=vote_type,
            created_at=utc_now(),
        )
        self._votes[(definition_id, user_id)] = vote

        await announce_write(
            self.channel,
            RealtimeVoteEvent(
                event_type=VoteEventType.UPDATE if previous else VoteEventType.INSERT,
                new=vote,
                old=previous,
            ),
        )
        return vote

    async def delete_vote(self, definition_id: DefinitionId, user_id: UserId) -> bool:
        """Delete a vote by definition and user."""
        previous = self._votes.pop((definition_id, user_id), None)
        if previous is None:
            return False

        await announce_write(
            self.channel,
            RealtimeVoteEvent(event_type=VoteEventType.DELETE, old=previous),
        )
        return True

    async def fetch_votes_for_user(
        self, user_id: UserId, definition_ids: Sequence[DefinitionId]
    ) -> list[Vote]:
        """Find a user's votes on multiple definitions (batch query)."""
        wanted = set(definition_ids)
        return [
            v
            for (definition_id, voter), v in self._votes.items()
            if voter == user_id and definition_id in wanted
        ]

    async def count_votes_since(self, user_id: UserId, since: datetime) -> int:
        """Count a user's votes created at or after ``since``."""
        return sum(
            1
            for (_, voter), v in self._votes.items()
            if voter == user_id and v.created_at >= since
        )

    async def fetch_aggregate(self, definition_id: DefinitionId) -> VoteAggregate:
        """Count votes on a definition."""
        votes = await self.find_by_definition(definition_id)
        return VoteAggregate.from_counts(
            upvotes=sum(1 for v in votes if v.vote_type == VoteType.UPVOTE),
            downvotes=sum(1 for v in votes if v.vote_type == VoteType.DOWNVOTE),
        )

    async def find_by_definition(self, definition_id: DefinitionId) -> list[Vote]:
        """Find all votes on a definition."""
        return [v for v in self._votes.values() if v.definition_id == definition_id]
