"""
Payment Pydantic schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class PaymentRecordResponse(BaseModel):
    """Schema for a payment history entry."""
    id: str
    parcel_id: str
    user_email: Optional[str] = None
    amount: Optional[float] = None
    transaction_id: Optional[str] = None
    payment_method: Optional[str] = None
    payment_time: datetime

    class Config:
        from_attributes = True


class CheckoutSessionRequest(BaseModel):
    amount_in_cents: int = Field(..., alias="amountInCents", gt=0, description="Amount in minor currency units")

    class Config:
        populate_by_name = True


class CheckoutSessionResponse(BaseModel):
    client_secret: str = Field(..., alias="clientSecret")

    class Config:
        populate_by_name = True
