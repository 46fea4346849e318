"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Unlike a blanket router-level auth dependency, access here is
decided per operation — REST routes declare theirs with Depends(), and
the gateway looks each operation's requirement up in its own table.
"""

from fastapi import APIRouter

from bizdir.api.auth import router as auth_router
from bizdir.api.gateway import router as gateway_router
from bizdir.api.health import router as health_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])
api_router.include_router(gateway_router, tags=["gateway"])
