"""Repository interfaces for the community voting domain.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the infrastructure layer.
"""

from taigi.domain.repository.definition import DefinitionRepository
from taigi.domain.repository.vote import VoteRepository

__all__ = [
    "DefinitionRepository",
    "VoteRepository",
]
