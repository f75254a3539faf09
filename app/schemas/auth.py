from pydantic import BaseModel, EmailStr, Field
from typing import Literal, Optional

# admin is accepted here so the service can refuse it with a clear message
RoleLiteral = Literal["customer", "owner", "broker", "photographer", "admin"]


class UserBase(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=2, max_length=120)
    phone: Optional[str] = Field(None, min_length=7, max_length=30)


class UserRegister(UserBase):
    password: str = Field(..., min_length=8, max_length=128)
    role: RoleLiteral = "customer"


class UserLogin(BaseModel):
    email: EmailStr
    password: str
