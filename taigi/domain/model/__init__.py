"""Domain model entities for the community voting core."""

from taigi.domain.model.definition import Definition, ScoredDefinition
from taigi.domain.model.event import RealtimeVoteEvent, VoteUpdateEvent
from taigi.domain.model.vote import (
    DefinitionScore,
    IntegrityReport,
    UserVoteEntry,
    Vote,
    VoteAggregate,
    VoteSummary,
    VotingStats,
)

__all__ = [
    "Definition",
    "ScoredDefinition",
    "Vote",
    "UserVoteEntry",
    "VoteSummary",
    "VoteAggregate",
    "DefinitionScore",
    "VotingStats",
    "IntegrityReport",
    "VoteUpdateEvent",
    "RealtimeVoteEvent",
]
