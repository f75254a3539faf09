"""
Authentication Service
Handles user registration, authentication, and token generation
"""
import logging
from datetime import timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import Conflict, Forbidden, Unauthenticated, ValidationError
from app.core.security import create_user_token, get_password_hash, verify_password
from app.models.user import User, UserRole, UserStatus
from app.services.events import AuditEvent, Outcome, notify_many
from app.services.property_service import active_admin_ids

logger = logging.getLogger(__name__)

# Roles that need an admin's approval before they can sign in
ROLES_REQUIRING_APPROVAL = frozenset({UserRole.OWNER, UserRole.BROKER, UserRole.PHOTOGRAPHER})


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.execute(select(User).where(User.email == email.lower())).scalar_one_or_none()


def serialize_me(user: User) -> dict:
    return {
        "id": user.id,
        "role": user.role,
        "status": user.status,
        "name": user.name,
        "email": user.email,
        "phone": user.phone,
    }


def register_user(
    db: Session,
    email: str,
    name: str,
    password: str,
    role: str = "customer",
    phone: Optional[str] = None,
) -> Outcome:
    """
    Create a new account

    Args:
        db: Database session
        email: User email (stored lower-cased)
        name: Display name
        password: Plain text password (will be hashed)
        role: Requested role; admin cannot be self-assigned
        phone: User phone number (optional)

    Returns:
        Outcome carrying the new user id and status
    """
    user_role = UserRole(role)
    if user_role == UserRole.ADMIN:
        raise ValidationError("Cannot register as admin")

    if get_user_by_email(db, email) is not None:
        raise Conflict("Email already registered")

    status = UserStatus.PENDING if user_role in ROLES_REQUIRING_APPROVAL else UserStatus.ACTIVE
    user = User(
        email=email.lower(),
        name=name,
        phone=phone,
        password_hash=get_password_hash(password),
        role=user_role,
        status=status,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"[AUTH] Registered user {user.id} as {user_role.value} ({status.value})")

    events = [AuditEvent(user.id, "USER_REGISTERED", "user", user.id, {"role": user_role.value})]
    if status == UserStatus.PENDING:
        events += notify_many(
            active_admin_ids(db),
            "approval",
            "Account pending approval",
            f"New {user_role.value} account for {user.name} requires approval.",
            "user",
            user.id,
        )
    return Outcome({"user": serialize_me(user)}, events)


def authenticate_user(db: Session, email: str, password: str) -> User:
    """
    Authenticate user with email and password

    Raises:
        Unauthenticated: unknown email or wrong password
        Forbidden: the account is pending or rejected
    """
    user = get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        raise Unauthenticated("Invalid email or password")
    if user.status != UserStatus.ACTIVE:
        raise Forbidden("Account is not active")
    return user


def generate_token(user: User) -> str:
    """JWT access token for user"""
    return create_user_token(user, timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
