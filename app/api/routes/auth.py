"""
Authentication Endpoints
Registration, login and the current user's profile
"""
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user
from app.models.user import User
from app.schemas.auth import UserLogin, UserRegister
from app.services import auth_service
from app.services.events import EventDispatcher

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(user_in: UserRegister, db: Session = Depends(get_db)):
    """Register a new account; owners, brokers and photographers wait for admin approval"""
    outcome = auth_service.register_user(
        db,
        email=user_in.email,
        name=user_in.name,
        password=user_in.password,
        role=user_in.role,
        phone=user_in.phone,
    )
    return {"ok": True, **EventDispatcher(db).dispatch_outcome(outcome)}


@router.post("/login")
def login(credentials: UserLogin, db: Session = Depends(get_db)):
    """Login and get access token with user info"""
    user = auth_service.authenticate_user(db, credentials.email, credentials.password)
    logger.info(f"[AUTH] User {user.id} logged in")
    return {
        "ok": True,
        "access_token": auth_service.generate_token(user),
        "token_type": "bearer",
        "user": auth_service.serialize_me(user),
    }


@router.get("/me")
def me(current_user: User = Depends(get_current_user)):
    return {"ok": True, "user": auth_service.serialize_me(current_user)}
