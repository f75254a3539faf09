"""
Media Endpoints
Uploads and public listing live under /properties/{id}/media; this router
only holds operations addressed by media id.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user
from app.models.user import User
from app.services.events import EventDispatcher
from app.services.media_service import MediaService

router = APIRouter()


@router.delete("/{media_id}")
def delete_media(
    media_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Soft delete; approval status is left as it was"""
    outcome = MediaService(db).soft_delete(current_user, media_id)
    return {"ok": True, **EventDispatcher(db).dispatch_outcome(outcome)}
