"""Domain layer errors.

Outcomes of the voting core are values: a ``VoteError`` inside an ``Err``.
"""

from enum import Enum
from typing import Any

from taigi.domain.value.common import ValueObject


class VoteErrorCode(str, Enum):
    """Error kinds returned by vote operations."""

    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    DUPLICATE_VOTE = "DUPLICATE_VOTE"
    SELF_VOTE = "SELF_VOTE"
    RATE_LIMITED = "RATE_LIMITED"
    REMOTE_ERROR = "REMOTE_ERROR"


class VoteError(ValueObject):
    """A failed vote operation: error kind plus user-facing message."""

    code: VoteErrorCode
    message: str
    details: dict[str, Any] | None = None

