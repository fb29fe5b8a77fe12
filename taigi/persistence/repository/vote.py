"""PostgreSQL implementation of Vote repository."""

from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import and_, delete, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from taigi.domain.model import RealtimeVoteEvent, Vote, VoteAggregate
from taigi.domain.repository import VoteRepository
from taigi.domain.service.realtime import VoteChannel, announce_write
from taigi.domain.value import DefinitionId, UserId, VoteEventType, VoteType
from taigi.persistence.mappers import row_to_vote
from taigi.persistence.tables import community_votes_table


class PostgresVoteRepository(VoteRepository):
    """PostgreSQL implementation of VoteRepository.

    Each write runs in a savepoint so a failed statement leaves the request
    session usable. Successful writes are published on the realtime channel
    when one is given.
    """

    def __init__(
        self, session: AsyncSession, channel: Optional[VoteChannel] = None
    ) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
            channel: Realtime channel notified of vote changes
        """
        self.session = session
        self.channel = channel

    def _pair(self, definition_id: DefinitionId, user_id: UserId):
        return and_(
            community_votes_table.c.definition_id == definition_id,
            community_votes_table.c.user_id == user_id,
        )

    async def _find(
        self, definition_id: DefinitionId, user_id: UserId
    ) -> Optional[Vote]:
        stmt = select(community_votes_table).where(self._pair(definition_id, user_id))
        result = await self.session.execute(stmt)
        row = result.fetchone()
        return row_to_vote(row._asdict()) if row else None

    async def upsert_vote(
        self, definition_id: DefinitionId, user_id: UserId, vote_type: VoteType
    ) -> Vote:
        """Insert a vote or switch its type (ON CONFLICT on the pair)."""
        async with self.session.begin_nested():
            previous = await self._find(definition_id, user_id)

            stmt = (
                pg_insert(community_votes_table)
                .values(
                    definition_id=definition_id,
                    user_id=user_id,
                    vote_type=vote_type.value,
                )
                .on_conflict_do_update(
                    index_elements=["definition_id", "user_id"],
                    set_={"vote_type": vote_type.value, "created_at": func.now()},
                )
                .returning(*community_votes_table.c)
            )
            result = await self.session.execute(stmt)
            vote = row_to_vote(result.one()._asdict())

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
        """Delete a user's vote on a definition."""
        async with self.session.begin_nested():
            stmt = (
                delete(community_votes_table)
                .where(self._pair(definition_id, user_id))
                .returning(*community_votes_table.c)
            )
            result = await self.session.execute(stmt)
            row = result.fetchone()

        if row is None:
            return False

        await announce_write(
            self.channel,
            RealtimeVoteEvent(
                event_type=VoteEventType.DELETE, old=row_to_vote(row._asdict())
            ),
        )
        return True

    async def fetch_votes_for_user(
        self, user_id: UserId, definition_ids: Sequence[DefinitionId]
    ) -> List[Vote]:
        """Find a user's votes on multiple definitions (batch query)."""
        if not definition_ids:
            return []

        stmt = select(community_votes_table).where(
            and_(
                community_votes_table.c.user_id == user_id,
                community_votes_table.c.definition_id.in_(definition_ids),
            )
        )
        result = await self.session.execute(stmt)
        return [row_to_vote(row._asdict()) for row in result.fetchall()]

    async def count_votes_since(self, user_id: UserId, since: datetime) -> int:
        """Count a user's votes with created_at in [since, now]."""
        stmt = select(func.count()).where(
            and_(
                community_votes_table.c.user_id == user_id,
                community_votes_table.c.created_at >= since,
            )
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def fetch_aggregate(self, definition_id: DefinitionId) -> VoteAggregate:
        """Count upvotes and downvotes on a definition."""
        vote_type = community_votes_table.c.vote_type
        stmt = select(
            func.count().filter(vote_type == VoteType.UPVOTE.value).label("upvotes"),
            func.count().filter(vote_type == VoteType.DOWNVOTE.value).label("downvotes"),
        ).where(community_votes_table.c.definition_id == definition_id)
        result = await self.session.execute(stmt)
        row = result.one()
        return VoteAggregate.from_counts(row.upvotes or 0, row.downvotes or 0)

    async def find_by_definition(self, definition_id: DefinitionId) -> List[Vote]:
        """Find all votes on a definition, oldest first."""
        stmt = (
            select(community_votes_table)
            .where(community_votes_table.c.definition_id == definition_id)
            .order_by(community_votes_table.c.created_at)
        )
        result = await self.session.execute(stmt)
        return [row_to_vote(row._asdict()) for row in result.fetchall()]
