# poliux/auth.py
"""
Bearer-token authentication.

Tokens are issued by the hosted auth provider and mirrored into `auth_tokens`;
this module only maps a token to a user id. Endpoints receive the id through a
dependency and pass it down explicitly.
"""
from typing import Optional

from fastapi import Header
from sqlmodel import Session

from .errors import AuthenticationError
from .logging_setup import get_logger
from .models import AuthToken, as_utc, utc_now
from .store import get_session

logger = get_logger("poliux.auth")


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def resolve_user(session: Session, authorization: Optional[str]) -> Optional[str]:
    """User id for a valid, unexpired bearer token; None otherwise."""
    token = _bearer_token(authorization)
    if token is None:
        return None
    row = session.get(AuthToken, token)
    if row is None:
        return None
    if row.expires_at is not None and as_utc(row.expires_at) <= utc_now():
        logger.info("TOKEN_EXPIRED", extra={"user_id": row.user_id})
        return None
    return row.user_id


def optional_user(authorization: Optional[str] = Header(default=None)) -> Optional[str]:
    # Anonymous access is allowed; a bad token is treated as no token
    with get_session() as s:
        return resolve_user(s, authorization)


def require_user(authorization: Optional[str] = Header(default=None)) -> str:
    if not authorization:
        raise AuthenticationError("Authentication required")
    with get_session() as s:
        user_id = resolve_user(s, authorization)
    if user_id is None:
        raise AuthenticationError("Invalid authentication")
    return user_id
