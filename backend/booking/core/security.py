"""
Bearer tokens that identify the calling user.

Tokens are HS256 JWTs whose ``sub`` claim carries the user id. Login and
account management happen elsewhere; this module only mints tokens (for
tests and the ``issue-token`` management command) and reads them back.
"""

import os
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

JWT_ALGORITHM = "HS256"
TOKEN_TYPE = "booking-access"
DEFAULT_TOKEN_LIFETIME = timedelta(hours=24)

_DEV_SECRET = "dev-booking-secret-change-me"


def get_jwt_secret_key() -> str:
    """Signing secret; production refuses the development default or short keys."""
    secret = os.getenv("JWT_SECRET_KEY", _DEV_SECRET)
    if os.getenv("FLASK_ENV") == "production" and (
        secret == _DEV_SECRET or len(secret) < 32
    ):
        raise ValueError(
            "JWT_SECRET_KEY must be set to at least 32 characters in production"
        )
    return secret


def create_user_token(user_id: int, lifetime: Optional[timedelta] = None) -> str:
    """Mint a bearer token for ``user_id``."""
    issued_at = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "type": TOKEN_TYPE,
        "iat": issued_at,
        "exp": issued_at + (lifetime or DEFAULT_TOKEN_LIFETIME),
    }
    return jwt.encode(claims, get_jwt_secret_key(), algorithm=JWT_ALGORITHM)


def get_user_id_from_token(token: str) -> Optional[int]:
    """User id carried by a valid token, or None for anything else."""
    try:
        claims = jwt.decode(token, get_jwt_secret_key(), algorithms=[JWT_ALGORITHM])
    except jwt.PyJWTError:
        return None

    if claims.get("type") != TOKEN_TYPE:
        return None
    try:
        return int(claims["sub"])
    except (KeyError, TypeError, ValueError):
        return None
