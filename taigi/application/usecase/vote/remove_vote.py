"""Remove vote use case."""

from pydantic import BaseModel

from taigi.domain.model import VoteSummary
from taigi.domain.repository import DefinitionRepository
from taigi.domain.result import Err, Ok, Result
from taigi.domain.service import SessionIdentity, VoteCoordinator

from .common import prime_coordinator, sign_in


class RemoveVoteRequest(BaseModel):
    """Remove vote request."""

    definition_id: str  # UUID string
    user_id: str  # User ID from authenticated user


class RemoveVoteResponse(BaseModel):
    """Remove vote response."""

    success: bool
    message: str
    summary: VoteSummary


class RemoveVoteUseCase:
    """Use case for withdrawing a vote from a community definition."""

    def __init__(
        self,
        identity: SessionIdentity,
        coordinator: VoteCoordinator,
        definition_repository: DefinitionRepository,
    ) -> None:
        self.identity = identity
        self.coordinator = coordinator
        self.definition_repository = definition_repository

    async def execute(self, request: RemoveVoteRequest) -> Result[RemoveVoteResponse]:
        """Execute remove vote flow.

        Returns:
            Ok with the updated counters, or Err from the coordinator
        """
        signed_in = sign_in(self.identity, request.user_id)
        if isinstance(signed_in, Err):
            return signed_in

        primed = await prime_coordinator(
            self.coordinator, self.definition_repository, request.definition_id
        )
        if isinstance(primed, Err):
            return primed

        result = await self.coordinator.remove_vote(request.definition_id)
        if isinstance(result, Err):
            return result

        definition = primed.value
        summary = (
            self.coordinator.get_vote_summary(definition.id)
            if definition is not None
            else VoteSummary()
        )
        return Ok(
            RemoveVoteResponse(
                success=True,
                message="Vote removed successfully",
                summary=summary,
            )
        )
