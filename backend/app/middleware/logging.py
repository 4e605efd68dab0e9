"""
Snapbook Backend - Access Log Middleware
=========================================

What:  One log line per request on the `snapbook.access` logger.
How:   Times the downstream call and logs method, path, status, duration,
       request id, caller (X-User-ID when present) and client IP. Level
       follows the status: 5xx ERROR, 4xx WARNING, else INFO.

Bodies, uploaded files and query strings are never logged (song links and
photo paths stay out of the access log).

Typical durations:
    GET  /api/scrapbooks/{id}        10-50ms
    POST /api/memories/{id}/photos   100ms-2s (HEIC decoding dominates)
    POST /api/memories/{id}/song-metadata  300ms-1.5s (two Spotify calls)
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.middleware.request_id import request_id_var

logger = logging.getLogger("snapbook.access")

QUIET_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        # Includes every middleware and handler below this one
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        status = response.status_code
        if status >= 500:
            level = logging.ERROR
        elif status >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO

        rid = request_id_var.get("")
        # Unvalidated header, logged as sent; routes reject malformed ids
        user_id = request.headers.get("X-User-ID", "-")
        client_ip = request.client.host if request.client else "unknown"

        # `extra` carries the same fields for structured handlers
        logger.log(
            level,
            "%s %s %d %.1fms [%s] user=%s from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            user_id,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "user_id": user_id,
                "client_ip": client_ip,
            },
        )
        return response
