from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class PhotoJobCreate(BaseModel):
    notes: Optional[str] = Field(None, max_length=5000)
    preferred_dates: Optional[List[str]] = Field(None, alias="preferredDates", max_length=10)
    preferred_photographer_id: Optional[int] = Field(None, alias="preferredPhotographerId")

    class Config:
        populate_by_name = True


class PhotoJobAccept(BaseModel):
    """Admins may name the photographer to assign; otherwise the caller is assigned."""
    photographer_id: Optional[int] = Field(None, alias="photographerId")

    class Config:
        populate_by_name = True


class PhotoJobReject(BaseModel):
    reason: str = Field(..., min_length=3, max_length=255)


class PhotoJobSchedule(BaseModel):
    scheduled_at: datetime = Field(..., alias="scheduledAt")

    class Config:
        populate_by_name = True


class JobMessageCreate(BaseModel):
    message: str = Field(..., min_length=1, max_length=2000)
