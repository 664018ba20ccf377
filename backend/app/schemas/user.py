"""
User Pydantic schemas.
"""

from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional
from backend.app.models.enums import UserRole


class UserCreate(BaseModel):
    """Schema for signup. The role is never taken from the caller."""
    email: EmailStr = Field(..., description="User email address")
    name: Optional[str] = Field(None, max_length=255)
    photo_url: Optional[str] = Field(None, max_length=1024)


class UserResponse(BaseModel):
    """Schema for user in search results."""
    id: str
    email: str
    name: Optional[str] = None
    photo_url: Optional[str] = None
    role: UserRole
    created_at: datetime

    class Config:
        from_attributes = True


class RoleLookup(BaseModel):
    email: EmailStr


class RoleResponse(BaseModel):
    role: UserRole


class RoleUpdate(BaseModel):
    """Schema for an admin role change."""
    role: UserRole
