from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class AnalyticsEventCreate(BaseModel):
    type: str = Field(..., min_length=3, max_length=60)
    property_id: Optional[int] = Field(None, alias="propertyId")
    session_id: Optional[str] = Field(None, alias="sessionId", max_length=80)
    meta: Optional[Dict[str, Any]] = None

    class Config:
        populate_by_name = True
