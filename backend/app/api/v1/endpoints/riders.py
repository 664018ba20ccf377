"""
Rider API Endpoints.

Public rider registration and listing; status changes are admin-only.
"""

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from backend.app.core.guards import require_admin
from backend.app.db.session import get_db
from backend.app.models.enums import RiderStatus
from backend.app.schemas.common import InsertResult, UpdateResult
from backend.app.schemas.rider import RiderCreate, RiderResponse, RiderStatusUpdate
from backend.app.services import rider_service

router = APIRouter(prefix="/riders", tags=["Riders"])


@router.get("", response_model=List[RiderResponse])
async def list_riders(
    status: Optional[RiderStatus] = Query(None, description="Filter by status"),
    warehouse: Optional[str] = Query(None, description="Filter by warehouse"),
    db: AsyncSession = Depends(get_db)
):
    """List riders, newest registrations first."""
    riders = await rider_service.list_riders(db, status=status, warehouse=warehouse)
    return [RiderResponse.model_validate(rider) for rider in riders]


@router.post("", response_model=InsertResult)
async def register_rider(
    rider_data: RiderCreate,
    db: AsyncSession = Depends(get_db)
):
    """Submit a rider application."""
    return await rider_service.register_rider(db, rider_data)


@router.patch("/{rider_id}", response_model=UpdateResult)
async def update_rider_status(
    status_update: RiderStatusUpdate,
    rider_id: str = Path(..., description="Rider ID"),
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Change a rider's status (admin-only).

    Setting the status to active also grants the rider role to the user
    with the rider's email.
    """
    return await rider_service.update_rider_status(
        db, rider_id, status_update.status, actor_email=admin["email"]
    )
