from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class RejectReason(BaseModel):
    reason: str = Field(..., min_length=3, max_length=500)


class AnnouncementCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=120)
    message: str = Field(..., min_length=5, max_length=3000)
    # Tags are checked against the allowed set by the moderation service
    audience: List[str] = Field(..., min_length=1)
    expires_at: Optional[datetime] = Field(None, alias="expiresAt")

    class Config:
        populate_by_name = True
