"""Vote entity and vote read models.

Votes let the community rank alternate definitions of dictionary words.
Each user holds at most one vote per definition, either an upvote or a
downvote.
"""

from datetime import datetime, timezone

from pydantic import Field

from taigi.domain.model.common import DomainModel
from taigi.domain.value import DefinitionId, UserId, VoteId, VoteType


def utc_now() -> datetime:
    """Current time, timezone-aware."""
    return datetime.now(timezone.utc)


class Vote(DomainModel):
    """Vote entity.

    Business rules:
    - One vote per user per definition (unique on definition_id, user_id)
    - Users cannot vote on definitions they authored
    - Changing the vote type keeps the vote's identity and refreshes created_at
    """

    id: VoteId
    definition_id: DefinitionId
    user_id: UserId
    vote_type: VoteType
    created_at: datetime = Field(default_factory=utc_now)


class UserVoteEntry(DomainModel):
    """The signed-in user's vote on one definition, as shown in the UI."""

    vote_type: VoteType
    user_id: UserId


class VoteSummary(DomainModel):
    """Vote counts for a definition, optionally with the viewer's own vote."""

    upvotes: int = 0
    downvotes: int = 0
    score: int = 0
    user_vote: VoteType | None = None


class VoteAggregate(DomainModel):
    """Score and counters for a definition as reported by persistence."""

    score: int = 0
    upvotes: int = 0
    downvotes: int = 0

    @classmethod
    def from_counts(cls, upvotes: int, downvotes: int) -> "VoteAggregate":
        return cls(score=upvotes - downvotes, upvotes=upvotes, downvotes=downvotes)


class DefinitionScore(DomainModel):
    """A definition id with its net score, used for rankings."""

    definition_id: DefinitionId
    score: int


class VotingStats(DomainModel):
    """Totals over every vote held by a VoteModel."""

    total_votes: int
    total_upvotes: int
    total_downvotes: int
    unique_voters: int
    definitions_with_votes: int


class IntegrityReport(DomainModel):
    """Outcome of a VoteModel index consistency check."""

    is_valid: bool
    errors: list[str] = Field(default_factory=list)
