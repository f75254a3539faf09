"""
Photo Job Endpoints
Jobs are created under /properties/{id}/photo-jobs; the rest is addressed by job id.
"""
from typing import Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user, require_roles
from app.models.user import User, UserRole
from app.schemas.photo_job import JobMessageCreate, PhotoJobAccept, PhotoJobReject, PhotoJobSchedule
from app.services.events import EventDispatcher
from app.services.photo_job_service import PhotoJobService

router = APIRouter()


@router.get("/open")
def list_open_jobs(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.PHOTOGRAPHER, UserRole.ADMIN)),
):
    return {"ok": True, "jobs": PhotoJobService(db).list_open(current_user)}


@router.get("/mine")
def list_my_jobs(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return {"ok": True, "jobs": PhotoJobService(db).list_mine(current_user)}


@router.post("/{job_id}/accept")
def accept_job(
    job_id: int,
    payload: Optional[PhotoJobAccept] = Body(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    photographer_id = payload.photographer_id if payload else None
    outcome = PhotoJobService(db).accept(current_user, job_id, photographer_id)
    return {"ok": True, **EventDispatcher(db).dispatch_outcome(outcome)}


@router.post("/{job_id}/reject")
def reject_job(
    job_id: int,
    payload: PhotoJobReject,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    outcome = PhotoJobService(db).reject(current_user, job_id, payload.reason)
    return {"ok": True, **EventDispatcher(db).dispatch_outcome(outcome)}


@router.post("/{job_id}/schedule")
def schedule_job(
    job_id: int,
    payload: PhotoJobSchedule,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    outcome = PhotoJobService(db).schedule(current_user, job_id, payload.scheduled_at)
    return {"ok": True, **EventDispatcher(db).dispatch_outcome(outcome)}


@router.post("/{job_id}/complete")
def complete_job(
    job_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    outcome = PhotoJobService(db).complete(current_user, job_id)
    return {"ok": True, **EventDispatcher(db).dispatch_outcome(outcome)}


@router.get("/{job_id}/messages")
def list_messages(
    job_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"ok": True, "messages": PhotoJobService(db).list_messages(current_user, job_id)}


@router.post("/{job_id}/messages")
def send_message(
    job_id: int,
    payload: JobMessageCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    outcome = PhotoJobService(db).send_message(current_user, job_id, payload.message)
    return {"ok": True, **EventDispatcher(db).dispatch_outcome(outcome)}
