"""Domain value objects for community content.

Value objects are immutable and defined by their values, not identity.
They encapsulate validation rules and business logic.
"""

from datetime import datetime
from enum import Enum

from pydantic import model_validator

from taigi.domain.value.common import ValueObject


class VoteType(str, Enum):
    """Type of vote a user can cast on a community definition."""

    UPVOTE = "upvote"
    DOWNVOTE = "downvote"


class ContentStatus(str, Enum):
    """Moderation status of a community definition."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    HIDDEN = "hidden"


class VoteEventType(str, Enum):
    """Kind of change reported by the realtime channel for the votes table.

    The hosted backend reports these in upper case, so lookups ignore case.
    """

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"

    @classmethod
    def _missing_(cls, value: object) -> "VoteEventType | None":
        if isinstance(value, str):
            lowered = value.lower()
            for member in cls:
                if member.value == lowered:
                    return member
        return None


class TimeWindow(ValueObject):
    """Inclusive time window ``[start, end]``."""

    start: datetime
    end: datetime

    @model_validator(mode="after")
    def validate_bounds(self) -> "TimeWindow":
        """Ensure the window is not inverted."""
        if self.start > self.end:
            raise ValueError("Time window start must not be after its end")
        return self

    def contains(self, moment: datetime) -> bool:
        """Whether ``moment`` falls inside the window, bounds included."""
        return self.start <= moment <= self.end
