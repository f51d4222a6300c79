"""HTTP middleware and per-route rate limiting."""

import logging
import time

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

import redis.asyncio as redis

from app.config import settings
from app.core.exceptions import RateLimitExceeded

logger = logging.getLogger(__name__)

UNLIMITED_PATHS = ("/health", "/docs", "/redoc", "/openapi.json")
WINDOW_SECONDS = 60


def client_ip(request: Request) -> str:
    """Caller address, honouring proxy headers."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    return request.client.host if request.client else "unknown"


class SlidingWindow:
    """One-minute sliding-window request counter in a Redis sorted set."""

    def __init__(self, redis_url: str | None = None):
        self.redis_url = redis_url or settings.redis_url
        self._redis: redis.Redis | None = None

    async def get_redis(self) -> redis.Redis:
        if self._redis is None:
            self._redis = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._redis

    async def hit(self, key: str) -> tuple[int, int]:
        """Record a request under ``key``.

        Returns:
            (requests already in the window, unix time the window resets)

        Raises:
            redis.RedisError: If Redis is unreachable
        """
        client = await self.get_redis()
        now = int(time.time())

        async with client.pipeline(transaction=True) as pipe:
            await pipe.zremrangebyscore(key, 0, now - WINDOW_SECONDS)
            await pipe.zcard(key)
            await pipe.zadd(key, {str(time.time_ns()): now})
            await pipe.expire(key, WINDOW_SECONDS)
            results = await pipe.execute()

        return results[1], now + WINDOW_SECONDS


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Global per-IP limit. Fails open when Redis is down."""

    def __init__(
        self,
        app,
        requests_per_minute: int = 100,
        redis_url: str | None = None,
    ):
        super().__init__(app)
        self.requests_per_minute = requests_per_minute
        self.window = SlidingWindow(redis_url)

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        if request.url.path in UNLIMITED_PATHS:
            return await call_next(request)

        if settings.debug or not settings.rate_limit_enabled:
            return await call_next(request)

        try:
            used, reset_at = await self.window.hit(f"rate_limit:{client_ip(request)}")
        except redis.RedisError:
            logger.warning("Rate limiter unavailable, allowing request through")
            return await call_next(request)

        limit_headers = {
            "X-RateLimit-Limit": str(self.requests_per_minute),
            "X-RateLimit-Reset": str(reset_at),
        }

        if used >= self.requests_per_minute:
            return JSONResponse(
                status_code=429,
                content={
                    "detail": "Too many requests. Please try again later.",
                    "retry_after": WINDOW_SECONDS,
                },
                headers={
                    **limit_headers,
                    "Retry-After": str(WINDOW_SECONDS),
                    "X-RateLimit-Remaining": "0",
                },
            )

        response = await call_next(request)
        response.headers.update(limit_headers)
        response.headers["X-RateLimit-Remaining"] = str(max(0, self.requests_per_minute - used - 1))
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id and logs its timing."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        started = time.perf_counter()
        request_id = request.headers.get("X-Request-ID") or str(time.time_ns())
        request.state.request_id = request_id

        response = await call_next(request)

        duration = time.perf_counter() - started
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration:.3f}s"

        if duration > 1.0:
            logger.warning(
                "Slow request %s %s took %.3fs (request_id=%s)",
                request.method,
                request.url.path,
                duration,
                request_id,
            )
        else:
            logger.debug(
                "%s %s -> %s in %.3fs",
                request.method,
                request.url.path,
                response.status_code,
                duration,
            )

        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to responses."""

    HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "X-XSS-Protection": "1; mode=block",
        "Referrer-Policy": "strict-origin-when-cross-origin",
    }

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        response = await call_next(request)
        response.headers.update(self.HEADERS)

        if not settings.debug:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response


class RateLimiter:
    """Per-route limit, used as a FastAPI dependency.

    Usage:
        @router.post("/verify", dependencies=[Depends(booking_limiter)])
    """

    def __init__(self, requests_per_minute: int = 10, key_prefix: str = "api"):
        self.requests_per_minute = requests_per_minute
        self.key_prefix = key_prefix
        self.window = SlidingWindow()

    async def __call__(self, request: Request) -> None:
        """Raises RateLimitExceeded once the caller has used up the window."""
        if not settings.rate_limit_enabled:
            return

        try:
            used, _ = await self.window.hit(f"rate:{self.key_prefix}:{client_ip(request)}")
        except redis.RedisError:
            logger.warning("Rate limiter '%s' unavailable, allowing request through", self.key_prefix)
            return

        if used >= self.requests_per_minute:
            logger.info("Rate limit '%s' hit by %s", self.key_prefix, client_ip(request))
            raise RateLimitExceeded()


# Checkout: opening orders and confirming payments
order_limiter = RateLimiter(requests_per_minute=10, key_prefix="create_order")
booking_limiter = RateLimiter(requests_per_minute=10, key_prefix="booking")
