"""Application layer DI providers."""

from dishka import Scope, provide

from taigi.application.usecase.vote import (
    GetVoteSummaryUseCase,
    RemoveVoteUseCase,
    SubmitVoteUseCase,
)
from taigi.domain.repository import DefinitionRepository, VoteRepository
from taigi.domain.service import SessionIdentity, VoteCoordinator, VoteModel
from taigi.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed.

    Use cases are REQUEST-scoped to align with domain service lifecycle.
    """

    scope = Scope.REQUEST

    @provide
    def get_submit_vote_use_case(
        self,
        identity: SessionIdentity,
        coordinator: VoteCoordinator,
        definition_repository: DefinitionRepository,
    ) -> SubmitVoteUseCase:
        """Provide submit vote use case."""
        return SubmitVoteUseCase(
            identity=identity,
            coordinator=coordinator,
            definition_repository=definition_repository,
        )

    @provide
    def get_remove_vote_use_case(
        self,
        identity: SessionIdentity,
        coordinator: VoteCoordinator,
        definition_repository: DefinitionRepository,
    ) -> RemoveVoteUseCase:
        """Provide remove vote use case."""
        return RemoveVoteUseCase(
            identity=identity,
            coordinator=coordinator,
            definition_repository=definition_repository,
        )

    @provide
    def get_vote_summary_use_case(
        self,
        vote_model: VoteModel,
        vote_repository: VoteRepository,
        definition_repository: DefinitionRepository,
    ) -> GetVoteSummaryUseCase:
        """Provide get vote summary use case."""
        return GetVoteSummaryUseCase(
            vote_model=vote_model,
            vote_repository=vote_repository,
            definition_repository=definition_repository,
        )
