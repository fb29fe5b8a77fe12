"""Async engine and session factory for the community PostgreSQL database."""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from taigi.config import Settings


def create_engine(settings: Settings) -> AsyncEngine:
    """One pooled engine per process; SQL is echoed in debug mode."""
    return create_async_engine(
        settings.database_url,
        echo=settings.debug,
        pool_pre_ping=True,
        pool_size=settings.database.pool_size,
        max_overflow=settings.database.max_overflow,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Sessions keep loaded rows usable after commit and never autoflush.

    Vote writes are explicit statements, so nothing relies on the unit of
    work flushing ORM state.
    """
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
