from typing import AsyncGenerator
from app.core.config import config as settings
from app.core.db.base import Base
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool


# Async SQLAlchemy engine, one per process
engine = create_async_engine(
    settings.db_url,
    echo=False,
    poolclass=(
        NullPool if not (settings.is_production) else None
    ),  # Disable pooling in debug
    future=True,  # Use SQLAlchemy 2.0 features
)

# Session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,  # Manual control over flushing
)


async def get_db_util() -> AsyncGenerator[AsyncSession, None]:
    """
    Database dependency for FastAPI.
    One session per request, committed on success and rolled back on error.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def create_tables() -> None:
    """Create missing tables; migrations remain the source of truth in production."""
    # Models must be imported so they register on the metadata
    from app.modules.users.models import User  # noqa: F401
    from app.modules.expenses.models import Expense  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    await engine.dispose()
