from typing import Any, AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession
from learnhub.db.session import get_db


async def get_database() -> AsyncGenerator[AsyncSession | Any, Any]:
    """
    Dependency that injects a database session into endpoints
    """
    async for session in get_db():
        yield session
