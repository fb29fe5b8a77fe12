"""Submit vote use case."""

from datetime import datetime

import logfire
from pydantic import BaseModel

from taigi.domain.model import VoteSummary
from taigi.domain.repository import DefinitionRepository
from taigi.domain.result import Err, Ok, Result
from taigi.domain.service import SessionIdentity, VoteCoordinator
from taigi.domain.value import VoteType

from .common import prime_coordinator, sign_in


class SubmitVoteRequest(BaseModel):
    """Submit vote request."""

    definition_id: str  # UUID string
    vote_type: str  # "upvote" or "downvote", validated by the coordinator
    user_id: str  # User ID from authenticated user


class SubmitVoteResponse(BaseModel):
    """Submit vote response."""

    vote_id: str
    definition_id: str
    vote_type: VoteType
    created_at: datetime
    summary: VoteSummary


class SubmitVoteUseCase:
    """Use case for casting or changing a vote on a community definition."""

    def __init__(
        self,
        identity: SessionIdentity,
        coordinator: VoteCoordinator,
        definition_repository: DefinitionRepository,
    ) -> None:
        """Initialize submit vote use case.

        Args:
            identity: Request session identity
            coordinator: Vote coordinator for this request
            definition_repository: Definition repository
        """
        self.identity = identity
        self.coordinator = coordinator
        self.definition_repository = definition_repository

    async def execute(self, request: SubmitVoteRequest) -> Result[SubmitVoteResponse]:
        """Execute submit vote flow.

        Args:
            request: Submit vote request

        Returns:
            Ok with the stored vote and updated counters, or Err from the
            coordinator
        """
        signed_in = sign_in(self.identity, request.user_id)
        if isinstance(signed_in, Err):
            return signed_in

        primed = await prime_coordinator(
            self.coordinator, self.definition_repository, request.definition_id
        )
        if isinstance(primed, Err):
            return primed

        result = await self.coordinator.submit_vote(
            request.definition_id, request.vote_type
        )
        if isinstance(result, Err):
            logfire.info("Vote not submitted", code=result.code.value)
            return result

        vote = result.value
        return Ok(
            SubmitVoteResponse(
                vote_id=str(vote.id),
                definition_id=str(vote.definition_id),
                vote_type=vote.vote_type,
                created_at=vote.created_at,
                summary=self.coordinator.get_vote_summary(vote.definition_id),
            )
        )
