"""Rate limiting middleware — Redis fixed window, one counter per caller per minute.

Caller identity is the ``sub`` of a valid Bearer token when present, otherwise
the client IP (first X-Forwarded-For hop when behind a proxy).

Redis logic:
    count = await redis.incr(key)
    if count == 1:
        await redis.expire(key, 60)
    if count > limit:
        -> 429 RateLimitError (9001) with Retry-After

If Redis is unreachable the request is let through and a warning is logged.
"""

import logging
from collections.abc import Awaitable, Callable

import redis.asyncio as aioredis
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from src.pf_common.errors import InvalidCredentialsError, RateLimitError
from src.pf_common.redis_client import get_redis
from src.pf_common.response import error_response
from src.pf_gateway.auth.jwt_handler import decode_token

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60
_EXEMPT_PATHS = frozenset({"/health", "/docs", "/openapi.json"})


def _client_key(request: Request) -> str:
    auth = request.headers.get("authorization", "")
    if auth.lower().startswith("bearer "):
        try:
            return f"user:{decode_token(auth[7:].strip())['sub']}"
        except InvalidCredentialsError:
            pass
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return f"ip:{forwarded.split(',')[0].strip()}"
    host = request.client.host if request.client else "unknown"
    return f"ip:{host}"


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        limit_per_minute: int,
        redis_getter: Callable[[], Awaitable[aioredis.Redis]] = get_redis,
    ) -> None:
        super().__init__(app)
        self._limit = limit_per_minute
        self._get_redis = redis_getter

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in _EXEMPT_PATHS:
            return await call_next(request)

        key = f"ratelimit:{_client_key(request)}"
        try:
            redis = await self._get_redis()
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, WINDOW_SECONDS)
            if count > self._limit:
                ttl = await redis.ttl(key)
                return self._reject(request, key, ttl if ttl and ttl > 0 else WINDOW_SECONDS)
        except RedisError as exc:
            logger.warning("Rate limit check skipped, Redis unavailable: %s", exc)

        return await call_next(request)

    def _reject(self, request: Request, key: str, retry_after: int) -> Response:
        logger.warning("Rate limit exceeded: %s %s", key, request.url.path)
        err = RateLimitError()
        body = error_response(err, getattr(request.state, "request_id", None))
        return JSONResponse(
            status_code=err.http_status,
            content=body.model_dump(),
            headers={"Retry-After": str(retry_after)},
        )
