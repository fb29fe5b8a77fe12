"""Domain services."""

from .base import Service
from .identity import CurrentUser, IdentityProvider, SessionIdentity
from .jwt_service import JWTService
from .realtime import Unsubscribe, VoteChannel, VoteEventHandler
from .validation import (
    CreateVoteInput,
    DefinitionRef,
    validate_create_vote,
    validate_definition_id,
)
from .vote_coordinator import VoteCoordinator
from .vote_model import VoteModel

__all__ = [
    "CreateVoteInput",
    "CurrentUser",
    "DefinitionRef",
    "IdentityProvider",
    "JWTService",
    "Service",
    "SessionIdentity",
    "Unsubscribe",
    "VoteChannel",
    "VoteCoordinator",
    "VoteEventHandler",
    "VoteModel",
    "validate_create_vote",
    "validate_definition_id",
]
