from typing import Any, AsyncGenerator

from sqlalchemy import NullPool, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from learnhub.config import get_settings
from learnhub.model import Base

settings = get_settings()
engine = create_async_engine(
    settings.database_url,
    echo=settings.database_echo,
    poolclass=NullPool,
)
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    # Services keep using loaded rows after their writes commit
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession | Any, Any]:
    async with AsyncSessionLocal() as session:
        yield session


async def init_db():
    """Create missing tables outside production; production schemas are migrated."""
    if settings.environment == "production":
        return
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def database_available(session: AsyncSession) -> bool:
    try:
        await session.execute(text("SELECT 1"))
        return True
    except (SQLAlchemyError, OSError):
        return False


async def close_db():
    await engine.dispose()
