"""
Rider management service.

Registration, listing and admin status changes. Activating a rider
promotes the user with the same email to the RIDER role.
"""

import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from backend.app.core.clock import utcnow
from backend.app.core.exceptions import ResourceNotFoundError
from backend.app.core.identifiers import parse_id
from backend.app.models.enums import RiderStatus, RiderWorkStatus, UserRole
from backend.app.models.rider import Rider
from backend.app.models.user import User
from backend.app.schemas.common import InsertResult, UpdateResult
from backend.app.schemas.rider import RiderCreate
from backend.app.services.audit import log_event, AuditAction

logger = logging.getLogger(__name__)

# Only admins move these
REGISTRATION_RESERVED_FIELDS = {"status", "work_status"}


async def get_rider(db: AsyncSession, rider_id: str) -> Rider:
    """
    Load a rider by id.

    Raises:
        InvalidIdentifierError: malformed id (no query issued)
        ResourceNotFoundError: no such rider
    """
    rider_id = parse_id(rider_id, "rider")
    result = await db.execute(select(Rider).where(Rider.id == rider_id))
    rider = result.scalar_one_or_none()
    if not rider:
        raise ResourceNotFoundError("Rider", rider_id)
    return rider


async def register_rider(db: AsyncSession, data: RiderCreate) -> InsertResult:
    details = {
        key: value for key, value in (data.model_extra or {}).items()
        if key not in REGISTRATION_RESERVED_FIELDS
    }
    rider = Rider(
        name=data.name,
        email=data.email,
        phone=data.phone,
        region=data.region,
        warehouse=data.warehouse,
        status=RiderStatus.PENDING,
        work_status=RiderWorkStatus.IDLE,
        details=details or None,
    )
    db.add(rider)
    await db.flush()

    await log_event(db, AuditAction.RIDER_REGISTERED, actor_email=rider.email, target_id=rider.id)
    await db.commit()

    logger.info("Rider %s registered (%s)", rider.id, rider.email)
    return InsertResult(inserted_id=rider.id)


async def list_riders(
    db: AsyncSession,
    status: Optional[RiderStatus] = None,
    warehouse: Optional[str] = None,
) -> list[Rider]:
    query = select(Rider)
    if status:
        query = query.where(Rider.status == status)
    if warehouse:
        query = query.where(Rider.warehouse == warehouse)

    result = await db.execute(query.order_by(Rider.created_at.desc()))
    return result.scalars().all()


async def promote_to_rider(db: AsyncSession, email: str) -> Optional[str]:
    """
    Upsert a user with role RIDER.

    Returns:
        The new user's id if one was inserted, None if an existing user
        was updated
    """
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user:
        user.role = UserRole.RIDER
        return None

    user = User(email=email, role=UserRole.RIDER)
    db.add(user)
    await db.flush()
    return user.id


async def update_rider_status(
    db: AsyncSession,
    rider_id: str,
    status: RiderStatus,
    actor_email: Optional[str] = None,
) -> UpdateResult:
    """
    Set a rider's status.

    Moving a rider to ACTIVE upserts the matching user with role RIDER in
    the same transaction. No other status touches the user store.
    """
    rider = await get_rider(db, rider_id)

    previous_status = rider.status
    modified = int(previous_status != status)
    rider.status = status
    rider.updated_at = utcnow()

    await log_event(
        db,
        AuditAction.RIDER_STATUS_CHANGED,
        actor_email=actor_email,
        target_id=rider.id,
        metadata={"previous_status": previous_status.value, "new_status": status.value},
    )

    if status == RiderStatus.ACTIVE and rider.email:
        upserted_id = await promote_to_rider(db, rider.email)
        await log_event(
            db,
            AuditAction.RIDER_PROMOTED,
            actor_email=actor_email,
            target_id=rider.id,
            metadata={"email": rider.email, "user_inserted": upserted_id is not None},
        )
        logger.info("Rider %s activated, %s promoted to rider role", rider.id, rider.email)

    await db.commit()
    return UpdateResult(matched_count=1, modified_count=modified)
