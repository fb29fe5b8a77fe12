"""Vote routes."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Cookie, HTTPException, status
from pydantic import BaseModel

from taigi.application.usecase.vote import (
    GetVoteSummaryRequest,
    GetVoteSummaryResponse,
    GetVoteSummaryUseCase,
    RemoveVoteRequest,
    RemoveVoteResponse,
    RemoveVoteUseCase,
    SubmitVoteRequest,
    SubmitVoteResponse,
    SubmitVoteUseCase,
)
from taigi.domain.result import Err
from taigi.domain.service import JWTService
from taigi.interface.error import http_error

router = APIRouter(tags=["votes"], route_class=DishkaRoute)


class VoteBody(BaseModel):
    """Vote request body."""

    vote_type: str


def _require_user(jwt_service: JWTService, auth_token: str | None) -> str:
    user_id = jwt_service.get_user_id_from_token(auth_token)
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required to vote",
        )
    return user_id


@router.post("/definitions/{definition_id}/vote", response_model=SubmitVoteResponse)
async def submit_vote(
    definition_id: str,
    body: VoteBody,
    submit_vote_use_case: FromDishka[SubmitVoteUseCase],
    jwt_service: FromDishka[JWTService],
    auth_token: str | None = Cookie(default=None),
) -> SubmitVoteResponse:
    """Upvote or downvote a community definition.

    Voting the other way switches the existing vote. Requires authentication.

    Args:
        definition_id: Definition UUID
        body: Requested vote type
        submit_vote_use_case: Submit vote use case from DI
        jwt_service: JWT service for token verification (injected)
        auth_token: JWT token from cookie

    Returns:
        Stored vote and updated counters

    Raises:
        HTTPException: If not authenticated or the vote is rejected
    """
    user_id = _require_user(jwt_service, auth_token)

    result = await submit_vote_use_case.execute(
        SubmitVoteRequest(
            definition_id=definition_id,
            vote_type=body.vote_type,
            user_id=user_id,
        )
    )
    if isinstance(result, Err):
        raise http_error(result)
    return result.value


@router.delete("/definitions/{definition_id}/vote", response_model=RemoveVoteResponse)
async def remove_vote(
    definition_id: str,
    remove_vote_use_case: FromDishka[RemoveVoteUseCase],
    jwt_service: FromDishka[JWTService],
    auth_token: str | None = Cookie(default=None),
) -> RemoveVoteResponse:
    """Remove the caller's vote from a community definition.

    Requires authentication.

    Raises:
        HTTPException: If not authenticated or there is no vote to remove
    """
    user_id = _require_user(jwt_service, auth_token)

    result = await remove_vote_use_case.execute(
        RemoveVoteRequest(definition_id=definition_id, user_id=user_id)
    )
    if isinstance(result, Err):
        raise http_error(result)
    return result.value


@router.get(
    "/definitions/{definition_id}/votes", response_model=GetVoteSummaryResponse
)
async def get_vote_summary(
    definition_id: str,
    get_vote_summary_use_case: FromDishka[GetVoteSummaryUseCase],
    jwt_service: FromDishka[JWTService],
    auth_token: str | None = Cookie(default=None),
) -> GetVoteSummaryResponse:
    """Vote counters of a community definition.

    Public endpoint. Authenticated callers also get their own vote.
    """
    user_id = jwt_service.get_user_id_from_token(auth_token)

    result = await get_vote_summary_use_case.execute(
        GetVoteSummaryRequest(definition_id=definition_id, user_id=user_id)
    )
    if isinstance(result, Err):
        raise http_error(result)
    return result.value
