"""Redis-backed fixed-window rate limiting per client IP.

Writes (POST/PATCH/PUT/DELETE) draw from a second, smaller budget so a
client hammering challenge completion or purchases is cut off before it
exhausts the read budget.
"""

import time
from typing import Any

import structlog
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from ecotrack.redis_client import get_redis

logger = structlog.get_logger()

_EXEMPT_PATHS = frozenset({"/health", "/ready"})
_WRITE_METHODS = frozenset({"POST", "PATCH", "PUT", "DELETE"})


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Count requests per IP and window in Redis; reply 429 over the limit."""

    def __init__(
        self,
        app: Any,  # noqa: ANN401
        requests_per_window: int = 100,
        write_requests_per_window: int = 30,
        window_seconds: int = 60,
        exempt_paths: frozenset[str] = _EXEMPT_PATHS,
    ) -> None:
        super().__init__(app)
        self.requests_per_window = requests_per_window
        self.write_requests_per_window = write_requests_per_window
        self.window_seconds = window_seconds
        self.exempt_paths = exempt_paths

    def _budget(self, method: str) -> tuple[str, int]:
        if method in _WRITE_METHODS:
            return "write", self.write_requests_per_window
        return "all", self.requests_per_window

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in self.exempt_paths or request.method == "OPTIONS":
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        bucket, limit = self._budget(request.method)
        window = int(time.time()) // self.window_seconds
        rate_key = f"ratelimit:{bucket}:{client_ip}:{window}"

        try:
            redis = get_redis()
            pipe = redis.pipeline()
            pipe.incr(rate_key)
            pipe.expire(rate_key, self.window_seconds + 1)
            results: list[Any] = await pipe.execute()
        except RuntimeError:
            # Redis not initialized: no limiting
            return await call_next(request)
        except RedisError as exc:
            logger.warning("rate_limit_unavailable", error=str(exc))
            return await call_next(request)

        current_count: int = results[0]
        if current_count > limit:
            return JSONResponse(
                status_code=429,
                content={"detail": "Too many requests. Try again later."},
                headers={
                    "Retry-After": str(self.window_seconds),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Limit": str(limit),
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Remaining"] = str(max(0, limit - current_count))
        response.headers["X-RateLimit-Limit"] = str(limit)
        return response
