"""
Database seeding script for the first admin.

Admin roles can only be granted by another admin, so the first one has to
be created here. Run after the database is reachable:

    python -m backend.seed_admin admin@example.com
"""

import asyncio
import sys

from sqlalchemy import select

from backend.app.db import session as db_session
from backend.app.db.session import Base
from backend.app.models.enums import UserRole
from backend.app.models.user import User


async def seed_admin(email: str):
    """Create the user as ADMIN, or promote an existing user."""
    engine = db_session.init_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        async with db_session.AsyncSessionLocal() as db:
            result = await db.execute(select(User).where(User.email == email))
            user = result.scalar_one_or_none()

            if user and user.role == UserRole.ADMIN:
                print(f"ℹ️  {email} is already an admin, nothing to do")
                return

            if user:
                user.role = UserRole.ADMIN
                print(f"✅ Promoted {email} to admin")
            else:
                db.add(User(email=email, role=UserRole.ADMIN))
                print(f"✅ Created admin user {email}")

            await db.commit()
    finally:
        await db_session.dispose_engine()


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("usage: python -m backend.seed_admin <email>")
        sys.exit(1)
    asyncio.run(seed_admin(sys.argv[1]))
