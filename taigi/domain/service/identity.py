"""Identity capability."""

from taigi.domain.model.common import DomainModel
from taigi.domain.value import UserId


class CurrentUser(DomainModel):
    """The authenticated user of a session."""

    id: UserId


class IdentityProvider:
    """Generic identity interface: who is signed in, if anyone."""

    async def get_current_user(self) -> CurrentUser | None:
        """Return the signed-in user, or None for anonymous sessions."""
        raise NotImplementedError


class SessionIdentity(IdentityProvider):
    """Identity held for one session (or one HTTP request)."""

    def __init__(self, user: CurrentUser | None = None) -> None:
        self._user = user

    def sign_in(self, user_id: UserId) -> CurrentUser:
        self._user = CurrentUser(id=user_id)
        return self._user

    def sign_out(self) -> None:
        self._user = None

    async def get_current_user(self) -> CurrentUser | None:
        return self._user
