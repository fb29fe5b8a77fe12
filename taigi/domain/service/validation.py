"""Input shape validation for vote requests.

Only the shape is checked here (UUID syntax, known vote type). Business
rules live in VoteModel.
"""

from typing import Any

from pydantic import ValidationError

from taigi.domain.error import VoteErrorCode
from taigi.domain.result import Ok, Result, fail
from taigi.domain.value import DefinitionId, VoteType
from taigi.domain.value.common import ValueObject


class DefinitionRef(ValueObject):
    """A well-formed definition reference."""

    definition_id: DefinitionId


class CreateVoteInput(DefinitionRef):
    """A well-formed vote request."""

    vote_type: VoteType


def validate_create_vote(definition_id: Any, vote_type: Any) -> Result[CreateVoteInput]:
    """Validate the shape of a vote request.

    Args:
        definition_id: Definition UUID (string or UUID)
        vote_type: "upvote" or "downvote"

    Returns:
        Ok with the parsed input, or Err(VALIDATION_ERROR)
    """
    try:
        return Ok(
            CreateVoteInput.model_validate(
                {"definition_id": definition_id, "vote_type": vote_type}
            )
        )
    except ValidationError as e:
        return fail(VoteErrorCode.VALIDATION_ERROR, _describe(e))


def validate_definition_id(definition_id: Any) -> Result[DefinitionId]:
    """Validate a definition UUID.

    Returns:
        Ok with the parsed id, or Err(VALIDATION_ERROR)
    """
    try:
        ref = DefinitionRef.model_validate({"definition_id": definition_id})
    except ValidationError as e:
        return fail(VoteErrorCode.VALIDATION_ERROR, _describe(e))
    return Ok(ref.definition_id)


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    field = ".".join(str(part) for part in first["loc"]) or "input"
    if field == "definition_id":
        return "Invalid definition ID format"
    if field == "vote_type":
        return "Vote type must be 'upvote' or 'downvote'"
    return f"Invalid {field}: {first['msg']}"
