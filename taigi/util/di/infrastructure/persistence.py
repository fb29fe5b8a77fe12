"""Persistence infrastructure providers."""

from collections.abc import AsyncIterator

from dishka import Scope, provide
import logfire
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from taigi.config import Settings
from taigi.domain.repository import DefinitionRepository, VoteRepository
from taigi.domain.service import VoteChannel
from taigi.persistence.database import create_engine, create_session_factory
from taigi.persistence.repository import (
    PostgresDefinitionRepository,
    PostgresVoteRepository,
)
from taigi.util.di.base import ProviderBase
from taigi.util.observability import instrument_sqlalchemy


class PersistenceProvider(ProviderBase):
    """Persistence component base."""

    __mock_component__ = "persistence"


class ProdPersistenceProvider(PersistenceProvider):
    """Production persistence provider using PostgreSQL."""

    __is_mock__ = False

    scope = Scope.APP

    @provide(scope=Scope.APP)
    def get_engine(self, settings: Settings) -> AsyncEngine:
        """Provide database engine."""
        engine = create_engine(settings)
        # Instrument SQLAlchemy for observability
        instrument_sqlalchemy(engine)
        return engine

    @provide(scope=Scope.APP)
    def get_session_factory(
        self, engine: AsyncEngine
    ) -> async_sessionmaker[AsyncSession]:
        """Provide session factory."""
        return create_session_factory(engine)

    @provide(scope=Scope.REQUEST)
    async def get_session(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> AsyncIterator[AsyncSession]:
        """Provide database session for request scope.

        The session is automatically committed at the end of the request
        if no exception occurred, or rolled back if an exception was raised.
        """
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
                logfire.info("Session committed")
            except Exception as e:
                logfire.warn("Session rollback", error=str(e))
                await session.rollback()
                raise

    @provide(scope=Scope.REQUEST)
    def get_definition_repository(self, session: AsyncSession) -> DefinitionRepository:
        """Provide Definition repository."""
        return PostgresDefinitionRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_vote_repository(
        self, session: AsyncSession, channel: VoteChannel
    ) -> VoteRepository:
        """Provide Vote repository publishing on the realtime channel."""
        return PostgresVoteRepository(session, channel=channel)
