"""
Payment history model.

Append-only ledger: one row per successful parcel payment.
"""

from sqlalchemy import Column, String, Float, DateTime
from backend.app.db.session import Base
from backend.app.core.clock import utcnow
from backend.app.core.identifiers import new_id


class PaymentRecord(Base):
    """Completed payment for a parcel. Never updated or deleted."""
    __tablename__ = "payment_history"

    id = Column(String(36), primary_key=True, default=new_id)
    parcel_id = Column(String(36), nullable=False, index=True)
    user_email = Column(String(255), nullable=True, index=True)
    amount = Column(Float, nullable=True)
    transaction_id = Column(String(255), nullable=True)
    payment_method = Column(String(100), nullable=True)
    payment_time = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<PaymentRecord(id={self.id}, parcel_id={self.parcel_id}, amount={self.amount})>"
