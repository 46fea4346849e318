"""Async SQLAlchemy engine and session factory.

Learn: One engine per process, one AsyncSession per request. Repositories
commit their own writes (an account delete and its businesses go out in
one commit); get_db only guarantees that a request which fails halfway
leaves nothing pending on its connection.
"""

from typing import AsyncIterator

import structlog
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from bizdir.config import settings

logger = structlog.get_logger()

# pre_ping drops connections Postgres closed while they sat in the pool
engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_size=5,
    max_overflow=15,
    pool_pre_ping=True,
)

# Objects stay readable after commit; services return them to the API layer
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency — one session per request, rolled back on error."""
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def dispose_engine() -> None:
    """Close every pooled connection (app shutdown, end of a CLI command)."""
    await engine.dispose()
    logger.debug("db.engine_disposed")
