"""Vote repository interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Sequence

from taigi.domain.model import Vote, VoteAggregate
from taigi.domain.value import DefinitionId, UserId, VoteType


class VoteRepository(ABC):
    """Repository for Vote entity.

    Votes are addressed by their (definition_id, user_id) pair rather than by
    id, so a repeated vote from the same user becomes an update.
    Implementations live in the infrastructure layer.
    """

    @abstractmethod
    async def upsert_vote(
        self, definition_id: DefinitionId, user_id: UserId, vote_type: VoteType
    ) -> Vote:
        """Insert a vote, or change the type of the existing one.

        Args:
            definition_id: Definition being voted on
            user_id: Voter
            vote_type: Upvote or downvote

        Returns:
            The stored vote
        """
        pass

    @abstractmethod
    async def delete_vote(self, definition_id: DefinitionId, user_id: UserId) -> bool:
        """Delete a user's vote on a definition.

        Args:
            definition_id: Definition the vote was cast on
            user_id: Voter

        Returns:
            True if a vote was deleted, False if no vote existed
        """
        pass

    @abstractmethod
    async def fetch_votes_for_user(
        self, user_id: UserId, definition_ids: Sequence[DefinitionId]
    ) -> List[Vote]:
        """Find a user's votes on several definitions (batch query).

        Args:
            user_id: Voter
            definition_ids: Definitions to check

        Returns:
            The user's votes on the given definitions
        """
        pass

    @abstractmethod
    async def count_votes_since(self, user_id: UserId, since: datetime) -> int:
        """Count a user's votes cast (or last changed) at or after ``since``.

        Args:
            user_id: Voter
            since: Start of the window, inclusive

        Returns:
            Number of the user's stored votes in the window
        """
        pass

    @abstractmethod
    async def fetch_aggregate(self, definition_id: DefinitionId) -> VoteAggregate:
        """Count votes on a definition.

        Args:
            definition_id: Definition to count

        Returns:
            Score, upvotes and downvotes (all zero if nobody voted)
        """
        pass

    @abstractmethod
    async def find_by_definition(self, definition_id: DefinitionId) -> List[Vote]:
        """Find all votes on a definition.

        Args:
            definition_id: Definition to look up

        Returns:
            Votes on the definition
        """
        pass
