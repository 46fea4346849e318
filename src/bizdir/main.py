"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (database, Redis).
Middleware, CORS, error handlers and routers all registered here.

The Container is built inside create_app, not lazily: a bad signing
secret stops the process before it ever serves a request.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bizdir import __version__
from bizdir.api import api_router
from bizdir.config import Settings, settings as default_settings
from bizdir.container import Container
from bizdir.errors import AppError, UnauthorizedError

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: FastAPI lifespan replaces on_event("startup") / on_event("shutdown").
    Anything before `yield` runs at startup, after `yield` runs at shutdown.
    """
    settings = app.state.container.settings
    logger.info(
        "bizdir.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    from bizdir.cache import close_redis, init_redis
    try:
        await init_redis(settings.redis_url)
        logger.info("bizdir.redis_connected", url=settings.redis_url)
    except Exception as e:
        logger.warning("bizdir.redis_unavailable", error=str(e))
        # Redis is optional; only rate limiting depends on it

    yield

    # Shutdown
    logger.info("bizdir.shutdown")
    await close_redis()

    from bizdir.db.engine import dispose_engine
    await dispose_engine()


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
        headers=headers,
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    settings = settings or default_settings
    container = Container.build(settings)

    app = FastAPI(
        title="bizdir",
        description="Business directory API — accounts, listings, access control",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.container = container
    app.add_exception_handler(AppError, app_error_handler)

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → Security → RateLimit → CORS → handler

    from bizdir.middleware.rate_limit import RateLimitMiddleware
    from bizdir.middleware.request_id import RequestIdMiddleware
    from bizdir.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        RateLimitMiddleware,
        default_rpm=settings.rate_limit_rpm,
        auth_rpm=settings.rate_limit_auth_rpm,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: bizdir.main:app)
app = create_app()
