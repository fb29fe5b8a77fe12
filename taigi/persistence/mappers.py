"""Mappers for converting between database rows and domain models.

Since we're using Pydantic domain models (immutable), we use manual mapping
instead of SQLAlchemy's classical imperative mapping.
"""

from typing import Any, Dict
from uuid import UUID

from taigi.domain.model import Definition, Vote
from taigi.domain.value import (
    ContentStatus,
    DefinitionId,
    UserId,
    VoteId,
    VoteType,
)


def _uuid(value: Any) -> UUID:
    return UUID(value) if isinstance(value, str) else value


def row_to_vote(row: Dict[str, Any]) -> Vote:
    """Convert database row to Vote domain model.

    Args:
        row: Database row as dict

    Returns:
        Vote domain model
    """
    return Vote(
        id=VoteId(_uuid(row["id"])),
        definition_id=DefinitionId(_uuid(row["definition_id"])),
        user_id=UserId(_uuid(row["user_id"])),
        vote_type=VoteType(row["vote_type"]),
        created_at=row["created_at"],
    )


def row_to_definition(row: Dict[str, Any]) -> Definition:
    """Convert database row to Definition domain model."""
    return Definition(
        id=DefinitionId(_uuid(row["id"])),
        word_id=row["word_id"],
        user_id=UserId(_uuid(row["user_id"])),
        definition=row["definition"],
        usage_example=row.get("usage_example"),
        tags=list(row.get("tags") or []),
        context=row.get("context"),
        status=ContentStatus(row["status"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def definition_to_dict(definition: Definition) -> Dict[str, Any]:
    """Convert Definition domain model to database dict.

    Only plain definition columns are kept, display counters are not stored.
    """
    data = definition.model_dump(include=set(Definition.model_fields))
    data["status"] = definition.status.value
    return data
