from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.core.config import settings

# Async engine (asyncpg in production, aiosqlite in tests)
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,
    pool_pre_ping=True,
)

# expire_on_commit=False keeps loaded attributes usable after commit,
# services re-fetch explicitly when they need fresh state
AsyncSessionLocal = async_sessionmaker(
    engine,
    expire_on_commit=False,
    class_=AsyncSession,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that yields an AsyncSession.
    Ensures that session is closed after request.

    Yields:
        AsyncSession: async session bound to the engine
    """
    async with AsyncSessionLocal() as session:
        yield session
