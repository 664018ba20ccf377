"""
Parcel workflow service.

Owns the parcel lifecycle: creation, payment, rider assignment, delivery
status changes and deletion, along with the side effects each step has on
riders and payment history. Multi-row changes commit as one transaction.
"""

import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func, or_

from backend.app.core.clock import utcnow
from backend.app.core.config import settings
from backend.app.core.exceptions import (
    AlreadyPaidError,
    InvalidTransitionError,
    ResourceNotFoundError,
)
from backend.app.core.identifiers import parse_id
from backend.app.models.enums import RiderWorkStatus
from backend.app.models.parcel import Parcel
from backend.app.models.parcel_enums import (
    ACTIVE_ASSIGNMENT_STATUSES,
    DeliveryStatus,
    PaymentStatus,
    can_transition,
)
from backend.app.models.payment_record import PaymentRecord
from backend.app.models.rider import Rider
from backend.app.schemas.common import DeleteResult, InsertResult, UpdateResult
from backend.app.schemas.parcel import AssignRiderRequest, MarkPaidRequest, ParcelCreate
from backend.app.services.audit import log_event, AuditAction
from backend.app.services.rider_service import get_rider

logger = logging.getLogger(__name__)


async def _load_parcel(db: AsyncSession, parcel_id: str) -> Parcel:
    result = await db.execute(select(Parcel).where(Parcel.id == parcel_id))
    parcel = result.scalar_one_or_none()
    if not parcel:
        raise ResourceNotFoundError("Parcel", message="Parcel not found with the provided ID.")
    return parcel


async def create_parcel(db: AsyncSession, data: ParcelCreate) -> InsertResult:
    """Insert a parcel as UNPAID / PENDING."""
    fields = data.model_dump(exclude_unset=True)
    extra = data.model_extra or {}
    for key in extra:
        fields.pop(key, None)

    parcel = Parcel(
        **fields,
        details=extra or None,
        payment_status=PaymentStatus.UNPAID,
        delivery_status=DeliveryStatus.PENDING,
        created_at=utcnow(),
    )
    db.add(parcel)
    await db.flush()

    await log_event(db, AuditAction.PARCEL_CREATED, actor_email=parcel.created_by, target_id=parcel.id)
    await db.commit()

    return InsertResult(inserted_id=parcel.id)


async def list_parcels(
    db: AsyncSession,
    user_email: Optional[str] = None,
    parcel_id: Optional[str] = None,
) -> list[Parcel]:
    """Parcels filtered by creator and/or id, newest first."""
    query = select(Parcel)
    if user_email:
        query = query.where(Parcel.created_by == user_email)
    if parcel_id:
        query = query.where(Parcel.id == parse_id(parcel_id, "parcel"))

    result = await db.execute(query.order_by(Parcel.created_at.desc()))
    return result.scalars().all()


async def list_parcels_by_status(
    db: AsyncSession,
    payment_status: Optional[PaymentStatus] = None,
    delivery_status: Optional[DeliveryStatus] = None,
) -> list[Parcel]:
    query = select(Parcel)
    if payment_status:
        query = query.where(Parcel.payment_status == payment_status)
    if delivery_status:
        query = query.where(Parcel.delivery_status == delivery_status)

    result = await db.execute(query.order_by(Parcel.created_at.desc()))
    return result.scalars().all()


async def get_rider_assignments(db: AsyncSession, rider_id: str) -> list[Parcel]:
    """
    Parcels a rider is currently carrying or about to pick up.

    Raises:
        ResourceNotFoundError: unknown rider, or no active assignments
    """
    rider = await get_rider(db, rider_id)

    result = await db.execute(
        select(Parcel)
        .where(
            Parcel.assign_rider_email == rider.email,
            Parcel.delivery_status.in_(ACTIVE_ASSIGNMENT_STATUSES),
        )
        .order_by(Parcel.created_at.desc())
    )
    parcels = result.scalars().all()
    if not parcels:
        raise ResourceNotFoundError("Parcel", message="No assigned parcels found for this rider.")
    return parcels


async def mark_paid(db: AsyncSession, data: MarkPaidRequest) -> PaymentRecord:
    """
    Mark a parcel PAID and append its payment record.

    The status flip is a conditional update on payment_status = UNPAID, so
    two concurrent calls cannot both succeed. The record insert shares the
    transaction with the update.

    Raises:
        InvalidIdentifierError: malformed parcel id
        ResourceNotFoundError: no such parcel
        AlreadyPaidError: parcel already PAID
    """
    parcel_id = parse_id(data.parcel_id, "parcel")
    parcel = await _load_parcel(db, parcel_id)

    if parcel.payment_status == PaymentStatus.PAID:
        raise AlreadyPaidError(parcel_id)

    payment_time = utcnow()
    result = await db.execute(
        update(Parcel)
        .where(Parcel.id == parcel_id, Parcel.payment_status == PaymentStatus.UNPAID)
        .values(payment_status=PaymentStatus.PAID, payment_time=payment_time)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        await db.rollback()
        raise AlreadyPaidError(parcel_id)

    record = PaymentRecord(
        parcel_id=parcel_id,
        user_email=data.email,
        amount=data.amount,
        transaction_id=data.transaction_id,
        payment_method=data.payment_method,
        payment_time=payment_time,
    )
    db.add(record)
    await db.flush()

    await log_event(
        db,
        AuditAction.PARCEL_PAID,
        actor_email=data.email,
        target_id=parcel_id,
        metadata={"payment_id": record.id, "amount": data.amount, "transaction_id": data.transaction_id},
    )
    await db.commit()

    logger.info("Parcel %s paid, payment record %s", parcel_id, record.id)
    return record


async def assign_rider(
    db: AsyncSession,
    parcel_id: str,
    data: AssignRiderRequest,
    actor_email: Optional[str] = None,
) -> tuple[UpdateResult, UpdateResult]:
    """
    Assign a rider to a parcel and mark the rider IN_DELIVERY.

    Both rows change in one transaction; if either is missing nothing is
    written.

    Returns:
        (parcel update result, rider update result)
    """
    parcel_id = parse_id(parcel_id, "parcel")
    rider_id = parse_id(data.rider_id, "rider")

    parcel = await _load_parcel(db, parcel_id)
    result = await db.execute(select(Rider).where(Rider.id == rider_id))
    rider = result.scalar_one_or_none()
    if not rider:
        raise ResourceNotFoundError("Rider", rider_id)

    _check_transition(parcel.delivery_status, data.delivery_status)

    now = utcnow()
    parcel_modified = int(
        parcel.delivery_status != data.delivery_status
        or parcel.assigned_rider_id != rider_id
        or parcel.assigned_rider_name != data.rider_name
        or parcel.assign_rider_email != data.rider_email
    )
    parcel.delivery_status = data.delivery_status
    parcel.assigned_rider_id = rider_id
    parcel.assigned_rider_name = data.rider_name
    parcel.assign_rider_email = data.rider_email
    parcel.updated_at = now

    rider_modified = int(rider.work_status != RiderWorkStatus.IN_DELIVERY)
    rider.work_status = RiderWorkStatus.IN_DELIVERY
    rider.updated_at = now

    await log_event(
        db,
        AuditAction.RIDER_ASSIGNED,
        actor_email=actor_email,
        target_id=parcel_id,
        metadata={"rider_id": rider_id, "rider_email": data.rider_email, "delivery_status": data.delivery_status.value},
    )
    await db.commit()

    logger.info("Rider %s assigned to parcel %s", rider_id, parcel_id)
    return (
        UpdateResult(matched_count=1, modified_count=parcel_modified),
        UpdateResult(matched_count=1, modified_count=rider_modified),
    )


async def update_delivery_status(
    db: AsyncSession,
    parcel_id: str,
    delivery_status: DeliveryStatus,
    actor_email: Optional[str] = None,
) -> UpdateResult:
    """
    Set a parcel's delivery status.

    Once a parcel is DELIVERED its rider goes back to IDLE, unless the
    rider still holds another active parcel.
    """
    parcel_id = parse_id(parcel_id, "parcel")
    parcel = await _load_parcel(db, parcel_id)

    previous_status = parcel.delivery_status
    _check_transition(previous_status, delivery_status)

    now = utcnow()
    modified = int(previous_status != delivery_status)
    parcel.delivery_status = delivery_status
    parcel.updated_at = now

    if delivery_status == DeliveryStatus.DELIVERED and (parcel.assigned_rider_id or parcel.assign_rider_email):
        await _release_riders(db, parcel, now)

    await log_event(
        db,
        AuditAction.DELIVERY_STATUS_CHANGED,
        actor_email=actor_email,
        target_id=parcel_id,
        metadata={"previous_status": previous_status.value, "new_status": delivery_status.value},
    )
    await db.commit()

    return UpdateResult(matched_count=1, modified_count=modified)


async def delete_parcel(
    db: AsyncSession,
    parcel_id: str,
    actor_email: Optional[str] = None,
) -> DeleteResult:
    """Delete a parcel regardless of its payment or delivery state."""
    parcel_id = parse_id(parcel_id, "parcel")

    result = await db.execute(delete(Parcel).where(Parcel.id == parcel_id))
    deleted = result.rowcount

    if deleted:
        await log_event(db, AuditAction.PARCEL_DELETED, actor_email=actor_email, target_id=parcel_id)
    await db.commit()

    return DeleteResult(deleted_count=deleted)


async def _release_riders(db: AsyncSession, parcel: Parcel, now) -> None:
    """
    Return the riders holding a delivered parcel to IDLE.

    A parcel is held by the rider it was assigned to and by the rider whose
    email it carries, since the assignments query matches on email. Each
    stays IN_DELIVERY while another active parcel still points at it by id
    or by email.
    """
    holders = Rider.id == parcel.assigned_rider_id
    if parcel.assign_rider_email:
        holders = or_(holders, Rider.email == parcel.assign_rider_email)

    result = await db.execute(select(Rider).where(holders))
    for rider in result.scalars().all():
        holds_rider = Parcel.assigned_rider_id == rider.id
        if rider.email:
            holds_rider = or_(holds_rider, Parcel.assign_rider_email == rider.email)

        remaining = await db.execute(
            select(func.count(Parcel.id)).where(
                Parcel.id != parcel.id,
                Parcel.delivery_status.in_(ACTIVE_ASSIGNMENT_STATUSES),
                holds_rider,
            )
        )
        if remaining.scalar():
            logger.info("Rider %s still has active parcels, keeping %s", rider.id, rider.work_status.value)
            continue

        rider.work_status = RiderWorkStatus.IDLE
        rider.updated_at = now


def _check_transition(current: DeliveryStatus, requested: DeliveryStatus) -> None:
    if not settings.enforce_delivery_transitions or current == requested:
        return
    if not can_transition(current, requested):
        raise InvalidTransitionError(current.value, requested.value)
