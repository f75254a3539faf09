from pydantic import BaseModel, EmailStr, Field
from typing import Optional


class PropertyCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=200)
    description: Optional[str] = Field(None, max_length=10000)
    price: Optional[float] = Field(None, ge=0)
    type: Optional[str] = Field(None, max_length=50)
    location: Optional[str] = Field(None, max_length=255)
    area: Optional[str] = Field(None, max_length=120)
    # The caller fills its own slot by role; a named counter-party must hold that role
    owner_id: Optional[int] = Field(None, alias="ownerId")
    broker_id: Optional[int] = Field(None, alias="brokerId")

    class Config:
        populate_by_name = True


class InquiryCreate(BaseModel):
    """Public contact form, no auth required."""
    name: str = Field(..., min_length=2, max_length=120)
    email: EmailStr
    phone: Optional[str] = Field(None, min_length=7, max_length=30)
    message: str = Field(..., min_length=2, max_length=2000)
