"""Domain value objects for the community voting core."""

from taigi.domain.value.identifiers import DefinitionId, UserId, VoteId
from taigi.domain.value.transition import VoteDelta
from taigi.domain.value.types import (
    ContentStatus,
    TimeWindow,
    VoteEventType,
    VoteType,
)

__all__ = [
    # Identifiers
    "UserId",
    "DefinitionId",
    "VoteId",
    # Types
    "ContentStatus",
    "TimeWindow",
    "VoteDelta",
    "VoteEventType",
    "VoteType",
]
