"""Per-IP fixed-window rate limiting backed by Redis.

Counter keys look like "bizdir:rl:{ip}:{bucket}:{minute}". The three
portal login endpoints share the stricter "login" bucket.

When Redis was never initialized (tests, local dev without Redis) the
middleware passes every request through.
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from bizdir.db.redis_pool import get_redis, redis_available

logger = structlog.get_logger()

LOGIN_PATHS = (
    "/api/v1/auth/login",
    "/api/v1/agent/auth/login",
    "/api/v1/operator/auth/login",
)


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, default_rpm: int = 120, auth_rpm: int = 10):
        super().__init__(app)
        self.default_rpm = default_rpm
        self.auth_rpm = auth_rpm

    async def dispatch(self, request: Request, call_next) -> Response:
        if not redis_available():
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        is_login = request.url.path.startswith(LOGIN_PATHS)
        rpm = self.auth_rpm if is_login else self.default_rpm
        bucket = "login" if is_login else "api"
        key = f"bizdir:rl:{client_ip}:{bucket}:{int(time.time() // 60)}"

        try:
            redis = get_redis()
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, 120)
        except Exception as e:
            logger.warning("rate_limit.redis_error", error=str(e))
            return await call_next(request)

        if count > rpm:
            logger.info("rate_limit.exceeded", ip=client_ip, bucket=bucket)
            return JSONResponse(
                status_code=429,
                content={"success": False, "error": "Rate limit exceeded. Try again later."},
                headers={"Retry-After": "60"},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(rpm)
        response.headers["X-RateLimit-Remaining"] = str(max(0, rpm - count))
        return response
