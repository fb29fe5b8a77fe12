"""In-memory repository implementations for testing."""

from .definition import InMemoryDefinitionRepository
from .vote import InMemoryVoteRepository

__all__ = [
    "InMemoryDefinitionRepository",
    "InMemoryVoteRepository",
]
