"""
Database connection and session management.

Key concepts:
- SQLAlchemy 2.0's async API: asyncpg for PostgreSQL, aiosqlite for
  local SQLite files (tests use a throwaway SQLite file)
- get_db() is a FastAPI dependency that provides a session per request
  and ensures cleanup afterwards
"""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from trainer_insights.config import settings


def _engine_options() -> dict:
    """Pool settings for the configured backend.

    SQLite connections are opened per checkout (NullPool); a pooled
    aiosqlite connection is tied to the event loop that opened it.
    """
    if settings.is_sqlite:
        return {"poolclass": NullPool}
    return {"pool_size": 5, "max_overflow": 10}


engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    **_engine_options(),
)

# expire_on_commit=False keeps objects usable after commit
# (a lazy load after commit fails under async)
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


async def get_db():
    """FastAPI dependency that provides a database session.

    Usage in a route:
        @router.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db():
    """Create all tables defined by our models.

    Called once at startup. The production schema is owned by the hosted
    store; this keeps local and test databases in sync with the models.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
