"""
Create or refresh the admin account from ADMIN_EMAIL / ADMIN_PASSWORD.

    python -m app.scripts.seed_admin

An existing admin with that e-mail gets its name, phone and password reset and
is re-activated. Roles never change after creation, so an existing non-admin
account with the same e-mail is left alone and the script exits non-zero.
"""
import logging
import sys
from typing import Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.security import get_password_hash
from app.database import SessionLocal, init_db
from app.models.user import User, UserRole, UserStatus
from app.services.auth_service import get_user_by_email

logger = logging.getLogger(__name__)


def seed_admin(
    db: Session,
    email: str,
    password: str,
    name: Optional[str] = None,
    phone: Optional[str] = None,
) -> User:
    """
    Upsert the admin account

    Raises:
        ValueError: the e-mail belongs to a non-admin account
    """
    password_hash = get_password_hash(password)
    name = name or settings.ADMIN_NAME
    phone = phone or settings.ADMIN_PHONE

    user = get_user_by_email(db, email)
    if user is not None:
        if user.role != UserRole.ADMIN:
            raise ValueError(f"{email} already belongs to a {user.role.value} account")
        user.name = name
        user.phone = phone
        user.password_hash = password_hash
        user.status = UserStatus.ACTIVE
        db.commit()
        logger.info(f"[SEED] Updated existing admin (id={user.id})")
        return user

    user = User(
        role=UserRole.ADMIN,
        status=UserStatus.ACTIVE,
        name=name,
        email=email.lower(),
        phone=phone,
        password_hash=password_hash,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"[SEED] Created admin user (id={user.id})")
    return user


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        logger.error("[SEED] Missing ADMIN_EMAIL or ADMIN_PASSWORD in environment.")
        return 1

    init_db()
    db = SessionLocal()
    try:
        seed_admin(db, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD)
    except ValueError as exc:
        logger.error(f"[SEED] seed_admin failed: {exc}")
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
