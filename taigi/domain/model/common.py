"""Base model for voting entities and read models."""

from pydantic import BaseModel, ConfigDict


class DomainModel(BaseModel):
    """Base class for all domain models.

    Models are immutable. Subclasses that opt out of ``frozen`` (the display
    cache) still get their field constraints checked on every assignment.
    """

    model_config = ConfigDict(
        frozen=True,
        validate_assignment=True,
        arbitrary_types_allowed=True,
    )
