"""
Pydantic schemas for viewing requests and viewings.
Request bodies accept the camelCase field names the frontend sends.
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field


class ViewingRequestCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=120)
    email: EmailStr
    phone: str = Field(..., min_length=7, max_length=30)
    preferred_dates: Optional[List[str]] = Field(None, alias="preferredDates", max_length=10)
    message: Optional[str] = Field(None, max_length=2000)

    # Routing overrides; default is the broker, falling back to the owner
    recipient_role: Optional[Literal["broker", "owner"]] = Field(None, alias="recipientRole")
    recipient_user_id: Optional[int] = Field(None, alias="recipientUserId")

    class Config:
        populate_by_name = True


class ViewingCreate(BaseModel):
    request_id: int = Field(..., alias="requestId")
    scheduled_at: datetime = Field(..., alias="scheduledAt")
    location_note: Optional[str] = Field(None, alias="locationNote", max_length=255)
    agent_note: Optional[str] = Field(None, alias="agentNote", max_length=255)

    class Config:
        populate_by_name = True


class ViewingReschedule(BaseModel):
    new_scheduled_at: datetime = Field(..., alias="newScheduledAt")
    reason: str = Field(..., min_length=3, max_length=255)

    class Config:
        populate_by_name = True


class ViewingCancel(BaseModel):
    reason: str = Field(..., min_length=3, max_length=255)
