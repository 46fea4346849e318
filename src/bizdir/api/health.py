"""Health check endpoint.

Learn: Postgres is required, Redis is not. The app still serves every
route without Redis (rate limiting just switches off), so a missing
Redis is reported but never turns the status to "degraded".
"""

from fastapi import APIRouter
from sqlalchemy import text

from bizdir import __version__
from bizdir.cache import get_redis
from bizdir.db.engine import engine

router = APIRouter()


async def _postgres_status() -> str:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        return f"error: {e}"
    return "ok"


async def _redis_status() -> str:
    try:
        redis = get_redis()
    except RuntimeError:
        return "disabled"
    try:
        await redis.ping()
    except Exception as e:
        return f"error: {e}"
    return "ok"


@router.get("/health")
async def health_check():
    """Report server, database and rate-limiter status."""
    postgres = await _postgres_status()
    return {
        "status": "healthy" if postgres == "ok" else "degraded",
        "server": "ok",
        "version": __version__,
        "postgres": postgres,
        "redis": await _redis_status(),
    }
