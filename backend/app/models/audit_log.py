"""
Audit Log Database Model.

Tracks admin actions and workflow side effects for later review.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from backend.app.db.session import Base
from backend.app.core.clock import utcnow


class AuditLog(Base):
    """
    Audit log model for admin actions and cross-entity side effects.

    Events logged:
    - ROLE_CHANGED / RIDER_PROMOTED
    - RIDER_STATUS_CHANGED
    - PARCEL_PAID / RIDER_ASSIGNED / DELIVERY_STATUS_CHANGED / PARCEL_DELETED
    """
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Who performed the action (None for anonymous or system actions)
    actor_email = Column(String(255), nullable=True, index=True)

    # What action was performed
    action = Column(String(100), nullable=False, index=True)

    # Entity the action applied to
    target_id = Column(String(36), nullable=True, index=True)

    # Additional context (JSON for flexibility)
    meta_data = Column(JSON, nullable=True)

    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', actor={self.actor_email}, target={self.target_id})>"
