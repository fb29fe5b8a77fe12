"""Community definition entities.

Definitions are alternate meanings for dictionary words submitted by the
community. The voting core only relies on the id and the author, plus the
score fields it keeps up to date for display.
"""

from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, Field

from taigi.domain.model.common import DomainModel
from taigi.domain.model.vote import VoteAggregate, utc_now
from taigi.domain.value import ContentStatus, DefinitionId, UserId, VoteDelta, VoteType


class Definition(DomainModel):
    """Community-submitted definition of a dictionary word."""

    id: DefinitionId
    word_id: str = Field(min_length=1)
    user_id: UserId  # Author
    definition: str = Field(min_length=1, max_length=2000)
    usage_example: Optional[str] = Field(default=None, max_length=1000)
    tags: list[str] = Field(default_factory=list)
    context: Optional[str] = None
    status: ContentStatus = ContentStatus.PENDING
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class ScoredDefinition(Definition):
    """Definition with its display-side vote counters.

    Unlike other domain models this one is mutable: it is the local cache the
    vote coordinator updates optimistically and rolls back.
    """

    model_config = ConfigDict(frozen=False)

    vote_score: int = 0
    upvotes: int = Field(default=0, ge=0)
    downvotes: int = Field(default=0, ge=0)
    user_vote: VoteType | None = None

    @classmethod
    def from_definition(
        cls,
        definition: Definition,
        aggregate: VoteAggregate | None = None,
        user_vote: VoteType | None = None,
    ) -> "ScoredDefinition":
        """Attach counters to a plain definition."""
        aggregate = aggregate or VoteAggregate()
        return cls(
            **definition.model_dump(include=set(Definition.model_fields)),
            vote_score=aggregate.score,
            upvotes=aggregate.upvotes,
            downvotes=aggregate.downvotes,
            user_vote=user_vote,
        )

    def apply_delta(self, delta: VoteDelta) -> VoteDelta:
        """Apply a transition delta to the counters.

        Counters never drop below zero and the score moves with the counters
        that actually changed. Returns the change actually applied, whose
        inverse restores the previous counters exactly.
        """
        upvotes = max(0, self.upvotes + delta.upvotes)
        downvotes = max(0, self.downvotes + delta.downvotes)
        applied = VoteDelta(
            score=(upvotes - self.upvotes) - (downvotes - self.downvotes),
            upvotes=upvotes - self.upvotes,
            downvotes=downvotes - self.downvotes,
        )

        self.vote_score += applied.score
        self.upvotes = upvotes
        self.downvotes = downvotes
        return applied

    def apply_aggregate(self, aggregate: VoteAggregate) -> None:
        """Overwrite the counters with authoritative values."""
        self.vote_score = aggregate.score
        self.upvotes = aggregate.upvotes
        self.downvotes = aggregate.downvotes
