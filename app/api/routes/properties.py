"""
Property Endpoints
Listings plus everything addressed through a property: media, inquiries,
viewing requests and photo jobs.

  POST   /properties                         create listing (owner, broker, admin)
  GET    /properties                         approved listings (public)
  GET    /properties/{id}                    listing detail (public)
  DELETE /properties/{id}                    soft delete
  POST   /properties/{id}/inquiries          contact form (auth optional)
  GET    /properties/{id}/media              approved media (public)
  POST   /properties/{id}/media              multipart upload
  POST   /properties/{id}/requests           viewing request (auth optional)
  POST   /properties/{id}/photo-jobs         photography job
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.database import get_db
from app.dependencies import get_current_user, get_current_user_optional
from app.models.user import User
from app.schemas.photo_job import PhotoJobCreate
from app.schemas.property import InquiryCreate, PropertyCreate
from app.schemas.viewing import ViewingRequestCreate
from app.services.events import EventDispatcher
from app.services.media_service import MediaService
from app.services.photo_job_service import PhotoJobService
from app.services.property_service import PropertyService
from app.services.storage import IncomingFile
from app.services.viewing_service import ViewingService

logger = logging.getLogger(__name__)

router = APIRouter()


# ==================== LISTINGS ====================

@router.post("", status_code=status.HTTP_201_CREATED)
def create_property(
    payload: PropertyCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    outcome = PropertyService(db).create(current_user, payload)
    return {"ok": True, **EventDispatcher(db).dispatch_outcome(outcome)}


@router.get("")
def list_properties(
    type: Optional[str] = None,
    area: Optional[str] = None,
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    properties = PropertyService(db).list_public(property_type=type, area=area, limit=limit)
    return {"ok": True, "properties": properties}


@router.get("/{property_id}")
def get_property(property_id: int, db: Session = Depends(get_db)):
    return {"ok": True, "property": PropertyService(db).get(property_id)}


@router.delete("/{property_id}")
def delete_property(
    property_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    outcome = PropertyService(db).soft_delete(current_user, property_id)
    return {"ok": True, **EventDispatcher(db).dispatch_outcome(outcome)}


@router.post("/{property_id}/inquiries", status_code=status.HTTP_201_CREATED)
def create_inquiry(
    property_id: int,
    payload: InquiryCreate,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_optional),
):
    outcome = PropertyService(db).create_inquiry(current_user, property_id, payload)
    return {"ok": True, **EventDispatcher(db).dispatch_outcome(outcome)}


# ==================== MEDIA ====================

@router.get("/{property_id}/media")
def list_property_media(property_id: int, db: Session = Depends(get_db)):
    return {"ok": True, "media": MediaService(db).list_public(property_id)}


@router.post("/{property_id}/media", status_code=status.HTTP_201_CREATED)
def upload_property_media(
    property_id: int,
    files: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    incoming = [
        IncomingFile(filename=f.filename or "upload", content_type=f.content_type or "", data=f.file.read())
        for f in files or []
    ]
    outcome = MediaService(db).upload(current_user, property_id, incoming)
    return {"ok": True, **EventDispatcher(db).dispatch_outcome(outcome)}


# ==================== VIEWING REQUESTS ====================

@router.post("/{property_id}/requests", status_code=status.HTTP_201_CREATED)
def create_viewing_request(
    property_id: int,
    payload: ViewingRequestCreate,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_optional),
):
    outcome = ViewingService(db).create_request(current_user, property_id, payload)
    return {"ok": True, **EventDispatcher(db).dispatch_outcome(outcome)}


# ==================== PHOTO JOBS ====================

@router.post("/{property_id}/photo-jobs", status_code=status.HTTP_201_CREATED)
def create_photo_job(
    property_id: int,
    payload: PhotoJobCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    outcome = PhotoJobService(db).create(current_user, property_id, payload)
    return {"ok": True, **EventDispatcher(db).dispatch_outcome(outcome)}
