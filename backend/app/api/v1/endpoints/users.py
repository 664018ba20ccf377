"""
User API Endpoints.

Signup, role lookup and admin role management.
"""

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from backend.app.core.config import settings
from backend.app.core.dependencies import get_current_principal
from backend.app.core.guards import require_admin
from backend.app.db.session import get_db
from backend.app.schemas.common import SignupResult, UpdateResult
from backend.app.schemas.user import RoleLookup, RoleResponse, RoleUpdate, UserCreate, UserResponse
from backend.app.services import user_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("", response_model=SignupResult, response_model_exclude_none=True)
async def signup(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db)
):
    """
    Register a user on first login.

    Idempotent: a known email returns insertedId=false and creates nothing.
    """
    return await user_service.signup(db, user_data)


@router.get("/search", response_model=List[UserResponse])
async def search_users(
    email: str = Query(..., min_length=1, description="Email fragment to search for"),
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Search users by email substring (admin-only)."""
    users = await user_service.search_users(db, email, settings.user_search_limit)
    return [UserResponse.model_validate(user) for user in users]


@router.post("/role", response_model=RoleResponse)
async def get_user_role(
    lookup: RoleLookup,
    principal: dict = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Return the stored role for an email."""
    role = await user_service.get_role(db, lookup.email)
    return RoleResponse(role=role)


@router.patch("/{user_id}/role", response_model=UpdateResult)
async def update_user_role(
    role_update: RoleUpdate,
    user_id: str = Path(..., description="User ID"),
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Set a user's role (admin-only)."""
    return await user_service.update_role(db, user_id, role_update.role, actor_email=admin["email"])
