"""
Security guards for self-access and admin-only endpoints.

Provides dependencies layered on top of the identity gate.
"""

from typing import Optional
from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from backend.app.core.dependencies import get_current_principal
from backend.app.core.exceptions import InsufficientPermissionsError
from backend.app.db.session import get_db
from backend.app.models.enums import UserRole
from backend.app.models.user import User


def verify_email(
    userEmail: Optional[str] = Query(None, description="Email the caller is acting for"),
    principal: dict = Depends(get_current_principal),
) -> dict:
    """
    Dependency for endpoints scoped to the caller's own records.

    Usage:
        @router.get("/parcels")
        async def list_parcels(principal: dict = Depends(verify_email)):
            ...

    When a userEmail query parameter is supplied it must equal the
    verified principal's email.

    Raises:
        InsufficientPermissionsError: 403 on mismatch
    """
    if userEmail is not None and userEmail != principal["email"]:
        raise InsufficientPermissionsError()

    return principal


async def require_admin(
    principal: dict = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """
    Dependency for admin-only endpoints.

    Looks the principal up in the user store; a missing record counts as
    non-admin.

    Usage:
        @router.patch("/riders/{rider_id}")
        async def update_rider_status(
            rider_id: str,
            admin: dict = Depends(require_admin)
        ):
            ...

    Returns:
        Principal dict if admin, raises 403 otherwise
    """
    result = await db.execute(select(User).where(User.email == principal["email"]))
    user = result.scalar_one_or_none()

    if user is None or user.role != UserRole.ADMIN:
        raise InsufficientPermissionsError()

    return principal
