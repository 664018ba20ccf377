"""
Rider database model.

A rider registers through the public API and is activated by an admin.
"""

from sqlalchemy import Column, String, DateTime, Enum, JSON
from backend.app.db.session import Base
from backend.app.core.clock import utcnow
from backend.app.core.identifiers import new_id
from backend.app.models.enums import RiderStatus, RiderWorkStatus


class Rider(Base):
    """
    Delivery agent.

    `status` is the admin-controlled availability; `work_status` flips to
    IN_DELIVERY when a parcel is assigned.
    """
    __tablename__ = "riders"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=True)
    email = Column(String(255), index=True, nullable=True)
    phone = Column(String(50), nullable=True)
    region = Column(String(100), nullable=True, index=True)
    warehouse = Column(String(100), nullable=True, index=True)

    status = Column(Enum(RiderStatus), default=RiderStatus.PENDING, nullable=False, index=True)
    work_status = Column(Enum(RiderWorkStatus), default=RiderWorkStatus.IDLE, nullable=False)

    # Registration fields the API does not model explicitly
    details = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<Rider(id={self.id}, email='{self.email}', status='{self.status.value}')>"
