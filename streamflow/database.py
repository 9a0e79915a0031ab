"""
Database configuration and session management.

This provides:
1. Declarative base shared by all models
2. Async SQLAlchemy engine (PostgreSQL in production, SQLite for local runs)
3. Session factory and the FastAPI session dependency
"""

import logging
from datetime import datetime, timezone
from typing import AsyncGenerator

from sqlalchemy import DateTime, func
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from streamflow.config import settings

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """
    Base model class for all database models.

    Provides common functionality that all models should have:
    - Primary key (id)
    - Created/updated timestamps
    - String representation
    """

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        """String representation for debugging"""
        return f"<{self.__class__.__name__}(id={self.id})>"


def create_engine_from_settings():
    """Create the async engine, applying pool settings where the driver supports them."""
    engine_kwargs = {
        "echo": settings.debug,
        "pool_pre_ping": True,
    }

    if not settings.is_sqlite:
        engine_kwargs.update(
            {
                "pool_size": settings.database_pool_size,
                "max_overflow": settings.database_max_overflow,
                "pool_recycle": 3600,
                "connect_args": {
                    "server_settings": {
                        "application_name": f"{settings.app_name}_{settings.environment}",
                    }
                },
            }
        )

    return create_async_engine(settings.database_url, **engine_kwargs)


engine = create_engine_from_settings()

# Create session factory
AsyncSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting database session.

    This is used in FastAPI endpoints to get a database session:

    @router.get("/playlists")
    async def get_playlists(db: AsyncSession = Depends(get_db)):
        # Use db here
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db():
    """Initialize database - create all tables"""
    async with engine.begin() as conn:
        # Import all models here to ensure they're registered
        from streamflow.models import activity, user  # noqa

        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")
