"""Shared steps of the vote use cases."""

from uuid import UUID

import logfire

from taigi.domain.error import VoteErrorCode
from taigi.domain.model import ScoredDefinition
from taigi.domain.repository import DefinitionRepository
from taigi.domain.result import Err, Ok, Result, fail
from taigi.domain.service import SessionIdentity, VoteCoordinator, validate_definition_id
from taigi.domain.value import UserId


def sign_in(identity: SessionIdentity, user_id: str) -> Result[UserId]:
    """Sign the request session in as ``user_id``.

    Returns:
        Ok with the user id, or Err(UNAUTHORIZED) for a malformed id
    """
    try:
        parsed = UserId(UUID(user_id))
    except ValueError:
        return fail(VoteErrorCode.UNAUTHORIZED, "You must be logged in to vote")

    identity.sign_in(parsed)
    return Ok(parsed)


async def prime_coordinator(
    coordinator: VoteCoordinator,
    definition_repository: DefinitionRepository,
    definition_id: str,
) -> Result[ScoredDefinition | None]:
    """Load a definition into a fresh coordinator.

    Tracks the definition with its stored counters and the signed-in user's
    vote. Malformed or unknown ids are left for the coordinator to report.

    Returns:
        Ok with the tracked definition (None when skipped), or Err(REMOTE_ERROR)
    """
    parsed = validate_definition_id(definition_id)
    if isinstance(parsed, Err):
        return Ok(None)

    with logfire.span("prime_coordinator", definition_id=str(parsed.value)):
        definition = await definition_repository.find_by_id(parsed.value)
        if definition is None:
            return Ok(None)

        coordinator.track_definitions([definition])

        refreshed = await coordinator.refresh_definition_votes(definition.id)
        if isinstance(refreshed, Err):
            return refreshed

        hydrated = await coordinator.fetch_user_votes([definition.id])
        if isinstance(hydrated, Err):
            return hydrated

        return Ok(coordinator.get_definition(definition.id))
