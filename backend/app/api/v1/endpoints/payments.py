"""
Payment API Endpoints.

Payment history and payment-intent creation.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from backend.app.core.dependencies import get_current_principal
from backend.app.db.session import get_db
from backend.app.schemas.payment import (
    CheckoutSessionRequest,
    CheckoutSessionResponse,
    PaymentRecordResponse,
)
from backend.app.services.payments import PaymentGateway, get_payment_gateway, list_payment_history

router = APIRouter(tags=["Payments"])


@router.get("/payments", response_model=List[PaymentRecordResponse])
async def get_payment_history(
    userEmail: Optional[str] = Query(None, description="Payer email"),
    principal: dict = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Payment history, latest first."""
    records = await list_payment_history(db, user_email=userEmail)
    return [PaymentRecordResponse.model_validate(r) for r in records]


@router.post("/create-checkout-session", response_model=CheckoutSessionResponse)
async def create_checkout_session(
    checkout: CheckoutSessionRequest,
    gateway: PaymentGateway = Depends(get_payment_gateway)
):
    """Create a payment intent and return its client secret."""
    client_secret = await gateway.create_payment_intent(checkout.amount_in_cents)
    return CheckoutSessionResponse(client_secret=client_secret)
