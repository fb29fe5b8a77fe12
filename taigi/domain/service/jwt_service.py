"""Session token service."""

import logfire

from taigi.config import AuthSettings
from taigi.util.jwt import JWTError, TokenPayload, create_token, verify_token

from .base import Service


class JWTService(Service):
    """Issues and checks the session tokens that identify voters."""

    def __init__(self, auth_settings: AuthSettings) -> None:
        self.auth_settings = auth_settings

    def create_token(self, user_id: str, username: str) -> str:
        token = create_token(user_id, username, self.auth_settings)
        logfire.info("Session token issued", user_id=user_id)
        return token

    def verify_token(self, token: str) -> TokenPayload:
        """Decode a session token.

        Raises:
            JWTError: If the token is invalid or expired
        """
        with logfire.span("jwt_service.verify_token"):
            return verify_token(token, self.auth_settings)

    def get_user_id_from_token(self, token: str | None) -> str | None:
        """User id carried by ``token``, None when missing or invalid.

        Voting routes use this to tell anonymous visitors apart without
        failing the request.
        """
        if not token:
            return None

        try:
            return self.verify_token(token).user_id
        except JWTError as e:
            logfire.debug("Rejected session token", reason=str(e))
            return None
