"""
Audit logging service for admin actions and workflow side effects.

Entries are added to the caller's session so they commit (or roll back)
together with the change they describe.
"""

from typing import Optional, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from backend.app.models.audit_log import AuditLog


# Audit event constants
class AuditAction:
    """Standardized audit action constants."""
    USER_CREATED = "USER_CREATED"
    ROLE_CHANGED = "ROLE_CHANGED"

    RIDER_REGISTERED = "RIDER_REGISTERED"
    RIDER_STATUS_CHANGED = "RIDER_STATUS_CHANGED"
    RIDER_PROMOTED = "RIDER_PROMOTED"

    PARCEL_CREATED = "PARCEL_CREATED"
    PARCEL_PAID = "PARCEL_PAID"
    RIDER_ASSIGNED = "RIDER_ASSIGNED"
    DELIVERY_STATUS_CHANGED = "DELIVERY_STATUS_CHANGED"
    PARCEL_DELETED = "PARCEL_DELETED"


async def log_event(
    db: AsyncSession,
    action: str,
    actor_email: Optional[str] = None,
    target_id: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> AuditLog:
    """
    Record an audit event in the current transaction.

    Args:
        db: Database session
        action: Action being performed (use AuditAction constants)
        actor_email: Email of the caller, None for unauthenticated routes
        target_id: ID of the entity acted upon
        metadata: Additional context as JSON

    Returns:
        Pending AuditLog instance (flushed, not committed)
    """
    audit_log = AuditLog(
        actor_email=actor_email,
        action=action,
        target_id=target_id,
        meta_data=metadata,
    )

    db.add(audit_log)
    await db.flush()

    return audit_log


async def get_audit_trail(
    db: AsyncSession,
    target_id: Optional[str] = None,
    action: Optional[str] = None,
    limit: int = 100
) -> list[AuditLog]:
    """
    Retrieve audit trail with optional filtering.

    Returns:
        List of AuditLog instances, most recent first
    """
    query = select(AuditLog).order_by(desc(AuditLog.timestamp), desc(AuditLog.id))

    if target_id:
        query = query.where(AuditLog.target_id == target_id)

    if action:
        query = query.where(AuditLog.action == action)

    query = query.limit(limit)

    result = await db.execute(query)
    return result.scalars().all()
