"""
User database model.

This module defines the User SQLAlchemy model. Users are created on first
signup and are never deleted.
"""

from sqlalchemy import Column, String, DateTime, Enum
from backend.app.db.session import Base
from backend.app.core.clock import utcnow
from backend.app.core.identifiers import new_id
from backend.app.models.enums import UserRole


class User(Base):
    """
    Marketplace account keyed by email.

    The role starts as USER and is changed either by an admin or by the
    rider activation cascade.
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=True)
    photo_url = Column(String(1024), nullable=True)

    role = Column(Enum(UserRole), default=UserRole.USER, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role.value}')>"
