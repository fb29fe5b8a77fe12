"""Definition repository interface."""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from taigi.domain.model import Definition
from taigi.domain.value import DefinitionId


class DefinitionRepository(ABC):
    """Repository for community Definition entities."""

    @abstractmethod
    async def find_by_id(self, definition_id: DefinitionId) -> Optional[Definition]:
        """Find a definition by ID.

        Args:
            definition_id: The definition's unique identifier

        Returns:
            The definition if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_ids(
        self, definition_ids: Sequence[DefinitionId]
    ) -> List[Definition]:
        """Find several definitions at once, unknown IDs are skipped."""
        pass

    @abstractmethod
    async def save(self, definition: Definition) -> Definition:
        """Save a definition (create or update).

        Args:
            definition: The definition to save

        Returns:
            The saved definition
        """
        pass
