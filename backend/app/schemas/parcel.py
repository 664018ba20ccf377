"""
Parcel Pydantic schemas.

Defines request and response models for the parcel workflow.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Dict, Optional
from backend.app.models.parcel_enums import PaymentStatus, DeliveryStatus
from backend.app.schemas.common import UpdateResult


class ParcelCreate(BaseModel):
    """
    Schema for creating a new parcel.

    Nothing is required; unknown fields are stored as parcel details.
    """
    tracking_id: Optional[str] = Field(None, max_length=100)
    title: Optional[str] = Field(None, max_length=255)
    parcel_type: Optional[str] = Field(None, max_length=50)
    weight: Optional[float] = Field(None, ge=0)
    cost: Optional[float] = Field(None, ge=0)
    sender_name: Optional[str] = Field(None, max_length=255)
    sender_region: Optional[str] = Field(None, max_length=100)
    sender_center: Optional[str] = Field(None, max_length=100)
    receiver_name: Optional[str] = Field(None, max_length=255)
    receiver_region: Optional[str] = Field(None, max_length=100)
    receiver_center: Optional[str] = Field(None, max_length=100)
    created_by: Optional[str] = Field(None, max_length=255, description="Shipper email")

    class Config:
        extra = "allow"


class ParcelResponse(BaseModel):
    """Schema for parcel response."""
    id: str
    tracking_id: Optional[str] = None
    title: Optional[str] = None
    parcel_type: Optional[str] = None
    weight: Optional[float] = None
    cost: Optional[float] = None
    sender_name: Optional[str] = None
    sender_region: Optional[str] = None
    sender_center: Optional[str] = None
    receiver_name: Optional[str] = None
    receiver_region: Optional[str] = None
    receiver_center: Optional[str] = None
    created_by: Optional[str] = None
    payment_status: PaymentStatus
    delivery_status: DeliveryStatus
    assigned_rider_id: Optional[str] = None
    assigned_rider_name: Optional[str] = None
    assign_rider_email: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    created_at: datetime
    payment_time: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MarkPaidRequest(BaseModel):
    """Schema for recording a completed payment against a parcel."""
    parcel_id: Optional[Any] = Field(None, alias="parcelId")
    email: Optional[str] = None
    amount: Optional[float] = None
    transaction_id: Optional[str] = Field(None, alias="transactionId")
    payment_method: Optional[str] = Field(None, alias="paymentMethod")

    class Config:
        populate_by_name = True


class MarkPaidResponse(BaseModel):
    message: str
    inserted_id: str = Field(..., alias="insertedId")

    class Config:
        populate_by_name = True


class AssignRiderRequest(BaseModel):
    """Schema for assigning a rider to a parcel."""
    rider_id: Optional[Any] = Field(None, alias="riderId")
    rider_name: Optional[str] = Field(None, alias="riderName")
    rider_email: Optional[str] = Field(None, alias="riderEmail")
    delivery_status: DeliveryStatus = DeliveryStatus.RIDER_ASSIGN

    class Config:
        populate_by_name = True


class AssignRiderResponse(BaseModel):
    """Both writes of an assignment, reported separately."""
    parcel: UpdateResult
    rider: UpdateResult


class DeliveryStatusUpdate(BaseModel):
    delivery_status: DeliveryStatus
