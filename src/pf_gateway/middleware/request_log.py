"""Request logging middleware.

Gives every request a correlation id (the caller's ``X-Request-ID`` when it is
a short token, a fresh ``req_...`` otherwise), stores it in request.state for
the ApiResponse envelope and echoes it back as a response header.

Log format:
    INFO [POST] /api/v1/transfers → 201 (23ms) req_a1b2c3d4e5f6 user=u-42
"""

import logging
import re
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.pf_common.response import new_request_id

logger = logging.getLogger("pf.request")

REQUEST_ID_HEADER = "X-Request-ID"
_CALLER_ID_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{1,64}$")


def _request_id_for(request: Request) -> str:
    incoming = request.headers.get(REQUEST_ID_HEADER, "")
    if _CALLER_ID_PATTERN.match(incoming):
        return incoming
    return new_request_id()


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.request_id = _request_id_for(request)

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        # user_id is set by the auth dependency; absent on public or rejected calls
        user_id = getattr(request.state, "user_id", "-")
        level = logging.ERROR if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "[%s] %s → %d (%.0fms) %s user=%s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request.state.request_id,
            user_id,
        )
        response.headers[REQUEST_ID_HEADER] = request.state.request_id
        return response
