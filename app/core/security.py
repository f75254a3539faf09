"""
Security helpers
Password hashing and JWT issuing/decoding
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings
from app.core.exceptions import Unauthenticated

# Password hashing
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify plain password against hashed password"""
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password"""
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token"""
    to_encode = data.copy()

    if expires_delta is not None:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_user_token(user, expires_delta: Optional[timedelta] = None) -> str:
    """Token for a user; "sub" must be a string for jose's claim checks"""
    role = user.role.value if hasattr(user.role, "value") else str(user.role)
    return create_access_token({"sub": str(user.id), "role": role}, expires_delta)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Decode and verify a JWT

    Raises:
        Unauthenticated: "Token expired" or "Invalid token"
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError:
        raise Unauthenticated("Token expired")
    except JWTError:
        raise Unauthenticated("Invalid token")
