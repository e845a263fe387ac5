"""Request logging middleware — one log line per state-changing request.

Business-level audit rows are written by ``app.services.audit``; this only
traces HTTP traffic (method, path, status, latency, acting user).
"""


import logging
import time
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("app.requests")

# Methods that mutate state
_WRITE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}

class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000)

        if request.method in _WRITE_METHODS:
            logger.info(
                "%s %s -> %d (%dms) actor=%s",
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
                request.headers.get("x-actor-id", "-"),
            )
        elif response.status_code >= 500:
            logger.warning("%s %s -> %d", request.method, request.url.path, response.status_code)

        return response
