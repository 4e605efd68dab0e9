"""
Snapbook Backend - Rate Limiting Middleware
============================================

What:  Per-client sliding-window rate limit in front of every API route.
How:   Keeps the request timestamps of each client for the last
       settings.rate_limit_window seconds; once settings.rate_limit_requests
       is reached the request is answered with 429 and a Retry-After header.

The client key is the socket peer. Behind a reverse proxy, list the proxy in
TRUSTED_PROXIES and the nearest untrusted X-Forwarded-For hop is used
instead; the header is ignored from any other peer.

State is in-process: with several workers each one enforces its own limit.
"""

import logging
import time
from collections import defaultdict, deque
from typing import Deque, Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.config import settings
from app.exceptions import RateLimitExceededError
from app.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

SWEEP_EVERY = 1000


def client_key(request: Request) -> str:
    """
    The address a request is counted against.

    X-Forwarded-For is only read when the socket peer is a trusted proxy.
    Hops are walked from the right, skipping trusted proxies, and the first
    untrusted address is the client. The left end of the header is whatever
    the client wrote and is never used on its own.
    """
    peer = request.client.host if request.client else "unknown"
    trusted = settings.trusted_proxies_set
    if peer not in trusted:
        return peer

    forwarded = request.headers.get("X-Forwarded-For", "")
    hops = [h.strip() for h in forwarded.split(",") if h.strip()]
    for hop in reversed(hops):
        if hop not in trusted:
            return hop
    return peer


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Sliding-window limiter.

    /health and the API docs are never limited.
    """

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._seen = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        key = client_key(request)
        now = time.time()
        window_start = now - settings.rate_limit_window

        # Drop timestamps that slid out of the window
        hits = self._hits[key]
        while hits and hits[0] <= window_start:
            hits.popleft()

        if len(hits) >= settings.rate_limit_requests:
            retry_after = int(hits[0] + settings.rate_limit_window - now) + 1
            logger.warning(
                "Rate limit exceeded for %s: %d requests in %ds",
                key,
                len(hits),
                settings.rate_limit_window,
            )
            return self._reject(RateLimitExceededError(retry_after=retry_after))

        hits.append(now)

        # Idle clients are removed periodically so the dict stays bounded
        self._seen += 1
        if self._seen % SWEEP_EVERY == 0:
            self._sweep(window_start)

        return await call_next(request)

    @staticmethod
    def _reject(exc: RateLimitExceededError) -> JSONResponse:
        # Raised errors would bypass the app's exception handlers from here
        return JSONResponse(
            status_code=429,
            content={
                "error": "rate_limit_exceeded",
                "message": exc.message,
                "details": exc.context,
                "request_id": request_id_var.get(""),
            },
            headers={"Retry-After": str(exc.retry_after)},
        )

    def _sweep(self, window_start: float) -> None:
        """Drops clients with no hit inside the current window."""
        idle = [k for k, hits in self._hits.items() if not hits or hits[-1] <= window_start]
        for k in idle:
            del self._hits[k]
        if idle:
            logger.debug("Rate limiter dropped %d idle clients", len(idle))
