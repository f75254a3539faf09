"""
Viewing Endpoints

  POST  /viewings/properties/{property_id}/requests   request a viewing (auth optional)
  GET   /viewings/requests                            requests sent or received
  POST  /viewings                                     schedule a viewing from a pending request
  GET   /viewings                                     viewings, soonest first
  PATCH /viewings/{id}/reschedule                     move an upcoming viewing
  PATCH /viewings/{id}/cancel                         cancel an upcoming viewing
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user, get_current_user_optional, require_roles
from app.models.user import User, UserRole
from app.models.viewing import ViewingRequestStatus, ViewingStatus
from app.schemas.viewing import ViewingCancel, ViewingCreate, ViewingRequestCreate, ViewingReschedule
from app.services.events import EventDispatcher
from app.services.viewing_service import ViewingService

router = APIRouter()


@router.post("/properties/{property_id}/requests", status_code=status.HTTP_201_CREATED)
def create_request(
    property_id: int,
    payload: ViewingRequestCreate,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_optional),
):
    outcome = ViewingService(db).create_request(current_user, property_id, payload)
    return {"ok": True, **EventDispatcher(db).dispatch_outcome(outcome)}


@router.get("/requests")
def list_requests(
    status: Optional[ViewingRequestStatus] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(
        require_roles(UserRole.CUSTOMER, UserRole.BROKER, UserRole.OWNER, UserRole.ADMIN)
    ),
):
    return {"ok": True, "requests": ViewingService(db).list_requests(current_user, status)}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_viewing(
    payload: ViewingCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    outcome = ViewingService(db).create_viewing(
        current_user,
        payload.request_id,
        payload.scheduled_at,
        location_note=payload.location_note,
        agent_note=payload.agent_note,
    )
    return {"ok": True, **EventDispatcher(db).dispatch_outcome(outcome)}


@router.get("")
def list_viewings(
    date_from: Optional[datetime] = Query(None, alias="from"),
    date_to: Optional[datetime] = Query(None, alias="to"),
    status: Optional[ViewingStatus] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    viewings = ViewingService(db).list_viewings(current_user, date_from, date_to, status)
    return {"ok": True, "viewings": viewings}


@router.patch("/{viewing_id}/reschedule")
def reschedule_viewing(
    viewing_id: int,
    payload: ViewingReschedule,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    outcome = ViewingService(db).reschedule(current_user, viewing_id, payload.new_scheduled_at, payload.reason)
    return {"ok": True, **EventDispatcher(db).dispatch_outcome(outcome)}


@router.patch("/{viewing_id}/cancel")
def cancel_viewing(
    viewing_id: int,
    payload: ViewingCancel,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    outcome = ViewingService(db).cancel(current_user, viewing_id, payload.reason)
    return {"ok": True, **EventDispatcher(db).dispatch_outcome(outcome)}
