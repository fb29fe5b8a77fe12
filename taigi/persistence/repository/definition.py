"""PostgreSQL implementation of Definition repository."""

from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from taigi.domain.model import Definition
from taigi.domain.repository import DefinitionRepository
from taigi.domain.value import DefinitionId
from taigi.persistence.mappers import definition_to_dict, row_to_definition
from taigi.persistence.tables import community_definitions_table


class PostgresDefinitionRepository(DefinitionRepository):
    """PostgreSQL implementation of DefinitionRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_by_id(self, definition_id: DefinitionId) -> Optional[Definition]:
        """Find a definition by ID."""
        stmt = select(community_definitions_table).where(
            community_definitions_table.c.id == definition_id
        )
        result = await self.session.execute(stmt)
        row = result.fetchone()
        return row_to_definition(row._asdict()) if row else None

    async def find_by_ids(
        self, definition_ids: Sequence[DefinitionId]
    ) -> List[Definition]:
        """Find several definitions at once (batch query)."""
        if not definition_ids:
            return []

        stmt = select(community_definitions_table).where(
            community_definitions_table.c.id.in_(definition_ids)
        )
        result = await self.session.execute(stmt)
        return [row_to_definition(row._asdict()) for row in result.fetchall()]

    async def save(self, definition: Definition) -> Definition:
        """Save a definition (create or update)."""
        values = definition_to_dict(definition)
        stmt = (
            pg_insert(community_definitions_table)
            .values(**values)
            .on_conflict_do_update(
                index_elements=["id"],
                set_={k: v for k, v in values.items() if k not in ("id", "created_at")},
            )
        )
        await self.session.execute(stmt)
        await self.session.flush()
        return definition
