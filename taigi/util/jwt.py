"""Session token encoding.

Tokens are HS256 JWTs carrying the dictionary user id in ``sub``.
"""

from datetime import datetime, timedelta, timezone

import jwt
from pydantic import BaseModel, Field

from taigi.config import AuthSettings


class TokenPayload(BaseModel):
    """Claims of a session token."""

    user_id: str = Field(alias="sub")
    username: str = Field(default="", alias="name")
    issued_at: datetime | None = Field(default=None, alias="iat")
    exp: datetime


class JWTError(Exception):
    """A token could not be decoded or has expired."""


def create_token(user_id: str, username: str, settings: AuthSettings) -> str:
    """Sign a session token valid for ``settings.jwt_expiry_days``."""
    now = datetime.now(timezone.utc)
    claims = {
        "sub": user_id,
        "name": username,
        "iat": now,
        "exp": now + timedelta(days=settings.jwt_expiry_days),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str, settings: AuthSettings) -> TokenPayload:
    """Decode and check a session token.

    Raises:
        JWTError: If the token is malformed, badly signed or expired
    """
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise JWTError("Token has expired") from e
    except jwt.InvalidTokenError as e:
        raise JWTError("Invalid token") from e
    return TokenPayload.model_validate(claims)
