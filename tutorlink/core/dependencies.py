# tutorlink/core/dependencies.py
# FastAPI dependency functions for authentication and authorization
#
#   get_optional_user -- public endpoints (public request form, job board)
#   require_login     -- any signed-in role
#   require_tutor     -- tutor self-service (apply / check / withdraw)
#   require_admin     -- admin panels (assignments, applications, demo classes)

from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import and_
from sqlalchemy.orm import Session

from tutorlink.core.security import decode_token
from tutorlink.db.session import get_db
from tutorlink.models.user import User

# Bearer token extractor -- auto_error=False so we can handle 401 ourselves
bearer_scheme = HTTPBearer(auto_error=False)


# ── Token Extraction ──────────────────────────────────────────────────────────

def _extract_user_from_token(
    credentials: Optional[HTTPAuthorizationCredentials],
    db: Session,
) -> Optional[User]:
    """
    Internal helper: decode Bearer token and load user from DB.
    Returns None if no token, invalid token, or user not found/inactive.
    """
    if not credentials:
        return None

    payload = decode_token(credentials.credentials)
    if not payload or payload.get("type") != "access":
        return None

    try:
        user_id = UUID(payload.get("sub") or "")
    except ValueError:
        return None

    return db.query(User).filter(
        and_(User.id == user_id, User.is_active == True)  # noqa: E712
    ).first()


def _unauthenticated() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Authentication required. Please log in.",
        headers={"WWW-Authenticate": "Bearer"},
    )


# ── Auth Dependencies ─────────────────────────────────────────────────────────

def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """
    Returns the authenticated user if a valid token is present.
    Returns None for anonymous requests -- does NOT raise 401.
    """
    return _extract_user_from_token(credentials, db)


def require_login(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Requires a valid JWT token. Raises 401 if not authenticated."""
    user = _extract_user_from_token(credentials, db)
    if not user:
        raise _unauthenticated()
    return user


def require_tutor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Requires role='tutor'. Raises 403 for other roles."""
    user = _extract_user_from_token(credentials, db)
    if not user:
        raise _unauthenticated()
    if user.role != "tutor":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only tutors can apply for tuition jobs.",
        )
    return user


def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Requires role='admin'. Raises 403 for all other roles."""
    user = _extract_user_from_token(credentials, db)
    if not user:
        raise _unauthenticated()
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required.",
        )
    return user
