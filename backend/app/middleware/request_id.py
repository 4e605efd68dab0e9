"""
Snapbook Backend - Request ID Middleware
=========================================

What:  Gives every request a correlation id, exposes it to loggers and the
       exception handlers, and echoes it in the X-Request-ID response header.
How:   A ContextVar holds the id for the duration of the request task.

A client-supplied X-Request-ID is reused only when it is a short token of
safe characters; anything else is replaced by a fresh id so log lines cannot
be forged through the header.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

_CLIENT_ID_RE = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def new_request_id() -> str:
    return uuid.uuid4().hex[:12]


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        supplied = request.headers.get("X-Request-ID", "")
        rid = supplied if _CLIENT_ID_RE.fullmatch(supplied) else new_request_id()

        # Visible to every log call and exception handler in this request
        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            # Restore the previous value
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = rid
        return response
