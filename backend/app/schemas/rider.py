"""
Rider Pydantic schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Dict, Optional
from backend.app.models.enums import RiderStatus, RiderWorkStatus


class RiderCreate(BaseModel):
    """
    Schema for rider registration.

    Fields beyond the modelled ones (age, national id, bike details, ...)
    are accepted and kept as rider details. Status is always PENDING on
    registration.
    """
    name: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    region: Optional[str] = Field(None, max_length=100)
    warehouse: Optional[str] = Field(None, max_length=100)

    class Config:
        extra = "allow"


class RiderStatusUpdate(BaseModel):
    status: RiderStatus


class RiderResponse(BaseModel):
    """Schema for rider response."""
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    region: Optional[str] = None
    warehouse: Optional[str] = None
    status: RiderStatus
    work_status: RiderWorkStatus
    details: Optional[Dict[str, Any]] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
