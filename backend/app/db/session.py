"""
Database session configuration.

This module handles database engine creation and session management
using SQLAlchemy with async support for PostgreSQL.
"""

from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from backend.app.core.config import settings
from backend.app.core.exceptions import ServiceUnavailableError

# Engine and session factory are created by init_engine() at startup
engine: Optional[AsyncEngine] = None
AsyncSessionLocal: Optional[async_sessionmaker] = None

# Create declarative base for models
Base = declarative_base()


def init_engine(database_url: str = None) -> AsyncEngine:
    """
    Create the async engine and session factory.

    SQLite URLs skip the pool sizing options, which only apply to
    server databases.
    """
    global engine, AsyncSessionLocal

    url = database_url or settings.database_url
    engine_kwargs = {"echo": settings.db_echo, "future": True}
    if not url.startswith("sqlite"):
        engine_kwargs["pool_size"] = settings.db_pool_size
        engine_kwargs["max_overflow"] = settings.db_max_overflow

    engine = create_async_engine(url, **engine_kwargs)
    AsyncSessionLocal = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )
    return engine


async def dispose_engine() -> None:
    """Close all pooled connections and forget the session factory."""
    global engine, AsyncSessionLocal

    if engine is not None:
        await engine.dispose()
    engine = None
    AsyncSessionLocal = None


async def get_db():
    """
    FastAPI dependency for database sessions.

    Yields an async database session and ensures it's properly closed.
    Raises ServiceUnavailableError if the engine was never initialized.
    """
    if AsyncSessionLocal is None:
        raise ServiceUnavailableError()

    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
