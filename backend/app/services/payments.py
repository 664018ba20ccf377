"""
Payment service.

Payment history queries and the bridge to the external payment processor
(Stripe). The processor is only asked for a payment intent; the parcel is
marked paid separately once the client confirms the payment.
"""

import logging
from typing import Optional

import stripe
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from starlette.concurrency import run_in_threadpool

from backend.app.core.config import settings
from backend.app.core.exceptions import PaymentProcessorError
from backend.app.models.payment_record import PaymentRecord

logger = logging.getLogger(__name__)


class PaymentGateway:
    """Creates payment intents through the Stripe SDK."""

    def __init__(self, api_key: Optional[str], currency: str = "usd"):
        self.api_key = api_key
        self.currency = currency

    async def create_payment_intent(self, amount_in_cents: int) -> str:
        """
        Create a card payment intent.

        Returns:
            The client secret the frontend confirms the payment with

        Raises:
            PaymentProcessorError: any processor or configuration failure
        """
        if not self.api_key:
            raise PaymentProcessorError("Payment processor is not configured")

        try:
            intent = await run_in_threadpool(
                stripe.PaymentIntent.create,
                api_key=self.api_key,
                amount=amount_in_cents,
                currency=self.currency,
                payment_method_types=["card"],
            )
        except stripe.StripeError as e:
            logger.error("Failed to create Stripe payment intent: %s", e)
            raise PaymentProcessorError(e.user_message or str(e))

        return intent.client_secret


def get_payment_gateway() -> PaymentGateway:
    """FastAPI dependency returning the configured payment gateway."""
    return PaymentGateway(api_key=settings.stripe_secret_key, currency=settings.payment_currency)


async def list_payment_history(db: AsyncSession, user_email: Optional[str] = None) -> list[PaymentRecord]:
    """Payment records, optionally for one payer, newest first."""
    query = select(PaymentRecord)
    if user_email:
        query = query.where(PaymentRecord.user_email == user_email)

    result = await db.execute(query.order_by(PaymentRecord.payment_time.desc()))
    return result.scalars().all()
