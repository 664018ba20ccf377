"""
Parcel database model.

Shippers create parcels; payment and rider assignment move them through
the delivery pipeline.
"""

from sqlalchemy import Column, String, Float, DateTime, Enum, JSON
from backend.app.db.session import Base
from backend.app.core.clock import utcnow
from backend.app.core.identifiers import new_id
from backend.app.models.parcel_enums import PaymentStatus, DeliveryStatus


class Parcel(Base):
    """
    Parcel model for the delivery marketplace.

    Two independent axes:
    - payment_status: UNPAID -> PAID (one-way)
    - delivery_status: PENDING -> RIDER_ASSIGN -> IN_TRANSIT -> DELIVERED
    """
    __tablename__ = "parcels"

    id = Column(String(36), primary_key=True, default=new_id)
    tracking_id = Column(String(100), nullable=True, index=True)

    # Shipment description
    title = Column(String(255), nullable=True)
    parcel_type = Column(String(50), nullable=True)
    weight = Column(Float, nullable=True)
    cost = Column(Float, nullable=True)

    sender_name = Column(String(255), nullable=True)
    sender_region = Column(String(100), nullable=True)
    sender_center = Column(String(100), nullable=True)
    receiver_name = Column(String(255), nullable=True)
    receiver_region = Column(String(100), nullable=True)
    receiver_center = Column(String(100), nullable=True)

    # Ownership
    created_by = Column(String(255), nullable=True, index=True)

    # Status
    payment_status = Column(Enum(PaymentStatus), default=PaymentStatus.UNPAID, nullable=False, index=True)
    delivery_status = Column(Enum(DeliveryStatus), default=DeliveryStatus.PENDING, nullable=False, index=True)

    # Assignment
    assigned_rider_id = Column(String(36), nullable=True)
    assigned_rider_name = Column(String(255), nullable=True)
    assign_rider_email = Column(String(255), nullable=True, index=True)

    # Caller-supplied fields without a dedicated column
    details = Column(JSON, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    payment_time = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return (
            f"<Parcel(id={self.id}, created_by='{self.created_by}', "
            f"payment='{self.payment_status.value}', delivery='{self.delivery_status.value}')>"
        )
