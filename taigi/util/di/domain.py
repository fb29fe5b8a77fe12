"""Domain layer DI providers."""

from dishka import Scope, provide

from taigi.config import AuthSettings, VotingSettings
from taigi.domain.repository import VoteRepository
from taigi.domain.service import (
    IdentityProvider,
    JWTService,
    SessionIdentity,
    VoteChannel,
    VoteCoordinator,
    VoteModel,
)
from taigi.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are REQUEST-scoped to align with repository/session lifecycle.
    Each HTTP request gets its own session identity, vote index and coordinator.
    """

    scope = Scope.REQUEST

    @provide
    def get_session_identity(self) -> SessionIdentity:
        """Provide the request's (initially anonymous) session identity."""
        return SessionIdentity()

    @provide
    def get_identity_provider(self, session: SessionIdentity) -> IdentityProvider:
        """Expose the session identity through the generic interface."""
        return session

    @provide
    def get_jwt_service(self, auth_settings: AuthSettings) -> JWTService:
        """Provide JWT token domain service."""
        return JWTService(auth_settings=auth_settings)

    @provide
    def get_vote_model(self) -> VoteModel:
        """Provide an empty vote index."""
        return VoteModel()

    @provide
    def get_vote_coordinator(
        self,
        vote_model: VoteModel,
        vote_repository: VoteRepository,
        vote_channel: VoteChannel,
        identity: IdentityProvider,
        settings: VotingSettings,
    ) -> VoteCoordinator:
        """Provide vote coordinator domain service."""
        return VoteCoordinator(
            vote_model=vote_model,
            vote_repository=vote_repository,
            vote_channel=vote_channel,
            identity=identity,
            settings=settings,
        )
