"""Vote change events."""

from datetime import datetime
from typing import Any, Optional, cast

from pydantic import Field, field_validator, model_validator

from taigi.domain.model.common import DomainModel
from taigi.domain.model.vote import Vote, utc_now
from taigi.domain.value import DefinitionId, VoteEventType, VoteType


class VoteUpdateEvent(DomainModel):
    """Broadcast to observers after a vote on a definition changed.

    ``new_vote_type`` is None when the vote was removed, ``previous_vote_type``
    is None when there was no vote before.
    """

    definition_id: DefinitionId
    new_vote_type: Optional[VoteType] = None
    previous_vote_type: Optional[VoteType] = None
    timestamp: datetime = Field(default_factory=utc_now)


class RealtimeVoteEvent(DomainModel):
    """A row change on the votes table delivered by the realtime channel.

    Inserts and updates carry the new row, deletes carry the old row.
    """

    event_type: VoteEventType
    new: Optional[Vote] = None
    old: Optional[Vote] = None

    @field_validator("event_type", mode="before")
    @classmethod
    def normalize_event_type(cls, v: Any) -> Any:
        """Accept upper-case event names as sent by the backend."""
        if isinstance(v, str):
            return v.lower()
        return v

    @model_validator(mode="after")
    def validate_payload(self) -> "RealtimeVoteEvent":
        """Ensure the row needed for this event type is present."""
        if self.event_type == VoteEventType.DELETE and self.old is None:
            raise ValueError("Delete events must carry the old vote")
        if self.event_type != VoteEventType.DELETE and self.new is None:
            raise ValueError(f"{self.event_type.value} events must carry the new vote")
        return self

    @property
    def vote(self) -> Vote:
        """The row this event is about."""
        row = self.old if self.event_type == VoteEventType.DELETE else self.new
        # validate_payload guarantees the row is present
        return cast(Vote, row)
