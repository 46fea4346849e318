"""Rate limiting middleware — Redis-based fixed window per minute.

Learn: Each IP gets a counter key like "bizdir:rl:{ip}:{bucket}:{minute}".
Login and registration get a stricter limit (10/min) — stateless tokens
mean a guessed password is good for a whole day, so guessing is throttled.

Gracefully skips rate limiting if Redis is unavailable (e.g., in tests).
A Redis error never fails the request itself.
"""

import time

import structlog
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from bizdir.cache import get_redis

logger = structlog.get_logger()

CREDENTIAL_PATHS = ("/api/v1/auth/login", "/api/v1/auth/register")


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Redis-based rate limiting per IP per minute."""

    def __init__(self, app, default_rpm: int = 100, auth_rpm: int = 10):
        super().__init__(app)
        self.default_rpm = default_rpm
        self.auth_rpm = auth_rpm

    async def dispatch(self, request: Request, call_next) -> Response:
        try:
            redis = get_redis()
        except RuntimeError:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        is_credential = request.url.path.startswith(CREDENTIAL_PATHS)
        rpm = self.auth_rpm if is_credential else self.default_rpm
        bucket = "auth" if is_credential else "api"
        key = f"bizdir:rl:{client_ip}:{bucket}:{int(time.time() // 60)}"

        try:
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, 120)  # 2-min TTL for safety
        except RedisError as e:
            logger.warning("rate_limit.redis_error", error=str(e))
            return await call_next(request)

        if count > rpm:
            logger.info("rate_limit.exceeded", client_ip=client_ip, bucket=bucket)
            return JSONResponse(
                status_code=429,
                content={"detail": "Rate limit exceeded. Try again later."},
                headers={"Retry-After": "60"},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(rpm)
        response.headers["X-RateLimit-Remaining"] = str(max(0, rpm - count))
        return response
