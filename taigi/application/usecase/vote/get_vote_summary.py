"""Get vote summary use case."""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from taigi.domain.error import VoteErrorCode
from taigi.domain.model import VoteSummary
from taigi.domain.repository import DefinitionRepository, VoteRepository
from taigi.domain.result import Err, Ok, Result, fail
from taigi.domain.service import VoteModel, validate_definition_id
from taigi.domain.value import UserId, VoteType


class GetVoteSummaryRequest(BaseModel):
    """Get vote summary request."""

    definition_id: str  # UUID string
    user_id: Optional[str] = None  # Viewer, if authenticated


class GetVoteSummaryResponse(BaseModel):
    """Get vote summary response."""

    definition_id: str
    upvotes: int
    downvotes: int
    score: int
    user_vote: Optional[VoteType] = None

    @classmethod
    def from_summary(
        cls, definition_id: str, summary: VoteSummary
    ) -> "GetVoteSummaryResponse":
        return cls(definition_id=definition_id, **summary.model_dump())


class GetVoteSummaryUseCase:
    """Use case for reading the vote counters of a definition."""

    def __init__(
        self,
        vote_model: VoteModel,
        vote_repository: VoteRepository,
        definition_repository: DefinitionRepository,
    ) -> None:
        """Initialize get vote summary use case.

        Args:
            vote_model: Vote index rebuilt from stored votes
            vote_repository: Vote repository
            definition_repository: Definition repository
        """
        self.vote_model = vote_model
        self.vote_repository = vote_repository
        self.definition_repository = definition_repository

    async def execute(
        self, request: GetVoteSummaryRequest
    ) -> Result[GetVoteSummaryResponse]:
        """Execute get vote summary flow.

        Returns:
            Ok with the counters, or Err(VALIDATION_ERROR / NOT_FOUND)
        """
        parsed = validate_definition_id(request.definition_id)
        if isinstance(parsed, Err):
            return parsed
        definition_id = parsed.value

        definition = await self.definition_repository.find_by_id(definition_id)
        if definition is None:
            return fail(VoteErrorCode.NOT_FOUND, "Definition not found")

        self.vote_model.load_votes(
            await self.vote_repository.find_by_definition(definition_id)
        )

        viewer = None
        if request.user_id:
            try:
                viewer = UserId(UUID(request.user_id))
            except ValueError:
                viewer = None

        summary = self.vote_model.get_vote_summary(definition_id, viewer)
        return Ok(GetVoteSummaryResponse.from_summary(str(definition_id), summary))
