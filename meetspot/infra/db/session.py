"""Database session dependency."""
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from meetspot.infra.db.base import get_sessionmaker


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session for one request; rolled back if the request fails."""
    async with get_sessionmaker()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
