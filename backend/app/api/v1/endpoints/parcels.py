"""
Parcel API Endpoints.

Parcel creation, payment marking, rider assignment, delivery status updates
and deletion.
"""

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from backend.app.core.guards import verify_email
from backend.app.db.session import get_db
from backend.app.models.parcel_enums import DeliveryStatus, PaymentStatus
from backend.app.schemas.common import DeleteResult, InsertResult, UpdateResult
from backend.app.schemas.parcel import (
    AssignRiderRequest,
    AssignRiderResponse,
    DeliveryStatusUpdate,
    MarkPaidRequest,
    MarkPaidResponse,
    ParcelCreate,
    ParcelResponse,
)
from backend.app.services import parcel_workflow

router = APIRouter(tags=["Parcels"])


@router.get("/parcels", response_model=List[ParcelResponse])
async def list_parcels(
    userEmail: Optional[str] = Query(None, description="Creator email"),
    parcelId: Optional[str] = Query(None, description="Parcel ID"),
    principal: dict = Depends(verify_email),
    db: AsyncSession = Depends(get_db)
):
    """
    List parcels, latest first.

    Requires a verified caller; userEmail, when given, must be the caller's.
    """
    parcels = await parcel_workflow.list_parcels(db, user_email=userEmail, parcel_id=parcelId)
    return [ParcelResponse.model_validate(p) for p in parcels]


@router.get("/parcels/byStatus", response_model=List[ParcelResponse])
async def list_parcels_by_status(
    payment_status: Optional[PaymentStatus] = Query(None),
    delivery_status: Optional[DeliveryStatus] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    """List parcels matching a payment / delivery status pair, latest first."""
    parcels = await parcel_workflow.list_parcels_by_status(
        db, payment_status=payment_status, delivery_status=delivery_status
    )
    return [ParcelResponse.model_validate(p) for p in parcels]


@router.get("/parcels/rider/{rider_id}/assigned", response_model=List[ParcelResponse])
async def list_rider_assignments(
    rider_id: str = Path(..., description="Rider ID"),
    db: AsyncSession = Depends(get_db)
):
    """
    Parcels assigned to a rider that are not yet delivered.

    Returns 404 when the rider has no active assignments.
    """
    parcels = await parcel_workflow.get_rider_assignments(db, rider_id)
    return [ParcelResponse.model_validate(p) for p in parcels]


@router.post("/parcels", response_model=InsertResult)
async def create_parcel(
    parcel_data: ParcelCreate,
    db: AsyncSession = Depends(get_db)
):
    """Create a parcel (unpaid, pending)."""
    return await parcel_workflow.create_parcel(db, parcel_data)


@router.patch("/parcels", response_model=MarkPaidResponse)
async def mark_parcel_paid(
    payment: MarkPaidRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Mark a parcel as paid and record the payment.

    Rejects a second payment for the same parcel with 400.
    """
    record = await parcel_workflow.mark_paid(db, payment)
    return MarkPaidResponse(
        message="Parcel payment status updated to 'paid' and payment history recorded.",
        inserted_id=record.id,
    )


@router.patch("/parcel/{parcel_id}/rider", response_model=UpdateResult)
async def update_delivery_status(
    status_update: DeliveryStatusUpdate,
    parcel_id: str = Path(..., description="Parcel ID"),
    db: AsyncSession = Depends(get_db)
):
    """Set a parcel's delivery status."""
    return await parcel_workflow.update_delivery_status(db, parcel_id, status_update.delivery_status)


@router.patch("/parcels/{parcel_id}/assign", response_model=AssignRiderResponse)
async def assign_rider(
    assignment: AssignRiderRequest,
    parcel_id: str = Path(..., description="Parcel ID"),
    db: AsyncSession = Depends(get_db)
):
    """Assign a rider to a parcel and mark the rider as in delivery."""
    parcel_result, rider_result = await parcel_workflow.assign_rider(db, parcel_id, assignment)
    return AssignRiderResponse(parcel=parcel_result, rider=rider_result)


@router.delete("/parcels/{parcel_id}", response_model=DeleteResult)
async def delete_parcel(
    parcel_id: str = Path(..., description="Parcel ID"),
    db: AsyncSession = Depends(get_db)
):
    """Delete a parcel by id."""
    return await parcel_workflow.delete_parcel(db, parcel_id)
