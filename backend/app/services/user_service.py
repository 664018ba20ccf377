"""
User account service.

Signup, role lookup and admin role management.
"""

import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select, func

from backend.app.core.exceptions import ResourceNotFoundError
from backend.app.core.identifiers import parse_id
from backend.app.models.enums import UserRole
from backend.app.models.user import User
from backend.app.schemas.common import SignupResult, UpdateResult
from backend.app.schemas.user import UserCreate
from backend.app.services.audit import log_event, AuditAction

logger = logging.getLogger(__name__)

USER_EXISTS_MESSAGE = "User already exists"


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def signup(db: AsyncSession, data: UserCreate) -> SignupResult:
    """
    Create a user on first signup.

    A repeat signup for a known email writes nothing and reports
    insertedId=False.
    """
    if await get_user_by_email(db, data.email):
        return SignupResult(message=USER_EXISTS_MESSAGE, inserted_id=False)

    user = User(
        email=data.email,
        name=data.name,
        photo_url=data.photo_url,
        role=UserRole.USER,
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError:
        # Lost a race with a concurrent signup for the same email
        await db.rollback()
        return SignupResult(message=USER_EXISTS_MESSAGE, inserted_id=False)

    await log_event(db, AuditAction.USER_CREATED, actor_email=user.email, target_id=user.id)
    await db.commit()

    logger.info("User %s signed up", user.email)
    return SignupResult(acknowledged=True, inserted_id=user.id)


async def search_users(db: AsyncSession, email: str, limit: int) -> list[User]:
    """Case-insensitive substring search on email."""
    query = (
        select(User)
        .where(func.lower(User.email).contains(email.lower(), autoescape=True))
        .order_by(User.created_at.desc())
        .limit(limit)
    )
    result = await db.execute(query)
    return result.scalars().all()


async def get_role(db: AsyncSession, email: str) -> UserRole:
    user = await get_user_by_email(db, email)
    if not user:
        raise ResourceNotFoundError("User", message="User not found")
    return user.role


async def update_role(
    db: AsyncSession,
    user_id: str,
    role: UserRole,
    actor_email: Optional[str] = None,
) -> UpdateResult:
    """Set a user's role (admin operation)."""
    user_id = parse_id(user_id, "user")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise ResourceNotFoundError("User", user_id)

    previous_role = user.role
    modified = int(previous_role != role)
    user.role = role

    await log_event(
        db,
        AuditAction.ROLE_CHANGED,
        actor_email=actor_email,
        target_id=user.id,
        metadata={"email": user.email, "previous_role": previous_role.value, "new_role": role.value},
    )
    await db.commit()

    logger.info("Role of %s changed from %s to %s", user.email, previous_role.value, role.value)
    return UpdateResult(matched_count=1, modified_count=modified)
