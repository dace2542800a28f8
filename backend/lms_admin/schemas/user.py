"""Request schemas for authentication and user management."""

from typing import Optional

from pydantic import EmailStr, Field

from .common import CamelModel


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserUpdate(CamelModel):
    fullname: Optional[str] = Field(None, min_length=2)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=8)
    # Honoured only when the caller is an admin
    is_active: Optional[bool] = None
    is_instructor: Optional[bool] = None
    is_admin: Optional[bool] = None


class UserSettingUpdate(CamelModel):
    value: Optional[str] = None
