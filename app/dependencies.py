import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.exceptions import AppError, Forbidden, Unauthenticated
from app.core.security import decode_access_token
from app.database import get_db
from app.models.user import User, UserRole, UserStatus

logger = logging.getLogger(__name__)

# auto_error off so a missing header gets our own 401 message
security = HTTPBearer(auto_error=False)


def _load_user(db: Session, payload: dict) -> Optional[User]:
    user_id = payload.get("sub")
    if user_id is None:
        return None
    try:
        return db.get(User, int(user_id))
    except (TypeError, ValueError):
        return None


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the bearer token to an active user.

    Raises 401 for a missing, expired or invalid token (or an unknown user)
    and 403 for accounts that are not active.
    """
    if credentials is None or not credentials.credentials:
        raise Unauthenticated("Missing Authorization Bearer token")

    payload = decode_access_token(credentials.credentials)

    user = _load_user(db, payload)
    if user is None:
        logger.warning(f"[AUTH] Token subject not found: {payload.get('sub')}")
        raise Unauthenticated("Invalid token (user not found)")

    if user.status != UserStatus.ACTIVE:
        raise Forbidden("Account is not active")

    return user


def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """
    Current user if a valid token is present, otherwise None

    Useful for endpoints that work with or without auth (guest viewing
    requests, inquiries, analytics events).
    """
    if credentials is None:
        return None
    try:
        return get_current_user(credentials, db)
    except AppError:
        return None


def require_roles(*roles: UserRole):
    """Dependency factory: 403 unless the current user has one of roles."""
    allowed = {UserRole(r) for r in roles}

    def role_checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            raise Forbidden("Insufficient permissions")
        return user

    return role_checker
