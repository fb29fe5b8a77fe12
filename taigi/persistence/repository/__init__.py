"""PostgreSQL repository implementations."""

from taigi.persistence.repository.definition import PostgresDefinitionRepository
from taigi.persistence.repository.vote import PostgresVoteRepository

__all__ = [
    "PostgresDefinitionRepository",
    "PostgresVoteRepository",
]
