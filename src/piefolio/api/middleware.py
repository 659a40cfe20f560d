"""Request logging middleware."""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)


def _level_for(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log one line per request with method, path, status and duration.

    Headers, bodies and query strings are left out; they carry user ids
    and planned amounts.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.scope.get("path", "")
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.log(
            _level_for(response.status_code),
            "%s %s -> %s (%.1f ms)",
            request.method, path, response.status_code, elapsed_ms,
        )
        return response
