"""Tagged result type for vote operations.

Vote operations return ``Ok(value)`` or ``Err(error)`` instead of raising, so
callers can branch on the outcome and show the message to the user::

    result = await coordinator.submit_vote(definition_id, "upvote")
    if isinstance(result, Err):
        show(result.message)
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from taigi.domain.error import VoteError, VoteErrorCode

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying a value."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """Failed outcome carrying a ``VoteError``."""

    error: VoteError

    @property
    def is_ok(self) -> bool:
        return False

    @property
    def code(self) -> VoteErrorCode:
        return self.error.code

    @property
    def message(self) -> str:
        return self.error.message


Result = Union[Ok[T], Err]


def fail(
    code: VoteErrorCode, message: str, details: dict[str, Any] | None = None
) -> Err:
    """Shorthand for building an ``Err``."""
    return Err(VoteError(code=code, message=message, details=details))
