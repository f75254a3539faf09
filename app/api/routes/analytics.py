"""
Analytics Endpoints
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user, get_current_user_optional, require_roles
from app.models.user import User, UserRole
from app.schemas.analytics import AnalyticsEventCreate
from app.services.analytics_service import AnalyticsService
from app.services.events import EventDispatcher

router = APIRouter()


@router.post("/events")
def track_event(
    payload: AnalyticsEventCreate,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_optional),
):
    outcome = AnalyticsService(db).track_event(
        current_user, payload.type, payload.property_id, payload.session_id, payload.meta
    )
    return {"ok": True, **EventDispatcher(db).dispatch_outcome(outcome)}


@router.get("/my-properties")
def my_properties_stats(
    date_from: Optional[datetime] = Query(None, alias="from"),
    date_to: Optional[datetime] = Query(None, alias="to"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.OWNER, UserRole.BROKER, UserRole.ADMIN)),
):
    stats = AnalyticsService(db).my_properties_stats(current_user, date_from, date_to)
    return {"ok": True, "properties": stats}


@router.get("/properties/{property_id}")
def property_stats(
    property_id: int,
    date_from: Optional[datetime] = Query(None, alias="from"),
    date_to: Optional[datetime] = Query(None, alias="to"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"ok": True, **AnalyticsService(db).property_stats(current_user, property_id, date_from, date_to)}
