"""Interface layer errors.

Vote operations report failures as ``Err`` values. The HTTP layer turns them
into ``HTTPException``s with a status per error code.
"""

from fastapi import HTTPException, status

from taigi.domain.error import VoteErrorCode
from taigi.domain.result import Err

_STATUS_BY_CODE: dict[VoteErrorCode, int] = {
    VoteErrorCode.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    VoteErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    VoteErrorCode.SELF_VOTE: status.HTTP_403_FORBIDDEN,
    VoteErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    VoteErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    VoteErrorCode.DUPLICATE_VOTE: status.HTTP_409_CONFLICT,
    VoteErrorCode.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
    VoteErrorCode.REMOTE_ERROR: status.HTTP_502_BAD_GATEWAY,
}


def status_for(code: VoteErrorCode) -> int:
    """HTTP status for a vote error code."""
    return _STATUS_BY_CODE.get(code, status.HTTP_400_BAD_REQUEST)


def http_error(err: Err) -> HTTPException:
    """Build the HTTPException reporting a failed vote operation."""
    return HTTPException(
        status_code=status_for(err.code),
        detail={"code": err.code.value, "message": err.message},
    )
