"""Rate limiting middleware — Redis fixed-window counters per IP.

Learn: Each client IP gets one counter per minute, keyed like
"bizdesk:rl:{ip}:{bucket}:{minute}". The credential endpoints (login,
register, refresh) share a much smaller "auth" bucket so passwords
can't be brute-forced at the general API rate.

Rate limiting is skipped entirely when Redis was never initialized
(tests, local dev without Redis) and per-request when Redis errors.
"""

import time

import structlog
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from bizdesk.cache.client import get_redis

logger = structlog.get_logger()

AUTH_PATHS = (
    "/api/v1/auth/login",
    "/api/v1/auth/register",
    "/api/v1/auth/refresh-token",
)


def bucket_for(path: str) -> str:
    return "auth" if path.startswith(AUTH_PATHS) else "api"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-IP, per-minute request limits backed by Redis."""

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
        bucket = bucket_for(request.url.path)
        rpm = self.auth_rpm if bucket == "auth" else self.default_rpm
        window = int(time.time() // 60)
        key = f"bizdesk:rl:{client_ip}:{bucket}:{window}"

        try:
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, 120)
        except RedisError as e:
            logger.warning("ratelimit.redis_error", error=str(e))
            return await call_next(request)

        if count > rpm:
            logger.warning("ratelimit.exceeded", ip=client_ip, bucket=bucket)
            return JSONResponse(
                status_code=429,
                content={
                    "success": False,
                    "message": "Too many requests, please try again later.",
                },
                headers={"Retry-After": "60"},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(rpm)
        response.headers["X-RateLimit-Remaining"] = str(max(0, rpm - count))
        return response
