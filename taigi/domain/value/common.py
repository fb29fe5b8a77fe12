"""Base class for value objects."""

from pydantic import BaseModel, ConfigDict


class ValueObject(BaseModel):
    """Immutable value compared field by field.

    Vote inputs, deltas and time windows derive from this; two instances
    with the same fields are interchangeable.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)
