# tutorlink/core/security.py
# JWT access token creation/decoding
# Used by: dependencies.py (decode), tests and local tooling (create)
#
# Login, refresh and password handling live in the identity service,
# not here -- this module only needs to understand its tokens.

from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from jose import JWTError, jwt

from tutorlink.core.config import settings


def create_access_token(user_id: UUID, role: str, expires_minutes: Optional[int] = None) -> str:
    """
    Create a short-lived JWT access token.
    Expires in ACCESS_TOKEN_EXPIRE_MINUTES (default: 60 min).

    Payload:
        sub  -- user UUID as string
        role -- student | tutor | admin | manager
        type -- "access"
        exp  -- expiry timestamp
    """
    now = datetime.now(timezone.utc)
    expire = now + timedelta(
        minutes=expires_minutes or settings.access_token_expire_minutes
    )
    payload = {
        "sub": str(user_id),
        "role": role,
        "type": "access",
        "exp": expire,
        "iat": now,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """
    Decode and validate a JWT token.
    Returns the payload dict if valid, None if expired or invalid.
    Does NOT check the database -- use dependencies.py for full validation.
    """
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return None
