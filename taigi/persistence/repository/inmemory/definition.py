"""In-memory definition repository for testing."""

from typing import Optional, Sequence

from taigi.domain.model import Definition
from taigi.domain.repository.definition import DefinitionRepository
from taigi.domain.value import DefinitionId


class InMemoryDefinitionRepository(DefinitionRepository):
    """In-memory implementation of DefinitionRepository for testing."""

    def __init__(self) -> None:
        self._definitions: dict[DefinitionId, Definition] = {}

    async def find_by_id(self, definition_id: DefinitionId) -> Optional[Definition]:
        """Find a definition by ID."""
        return self._definitions.get(definition_id)

    async def find_by_ids(
        self, definition_ids: Sequence[DefinitionId]
    ) -> list[Definition]:
        """Find several definitions at once."""
        return [
            self._definitions[definition_id]
            for definition_id in definition_ids
            if definition_id in self._definitions
        ]

    async def save(self, definition: Definition) -> Definition:
        """Save a definition (create or update)."""
        self._definitions[definition.id] = definition
        return definition
