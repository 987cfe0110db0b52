"""
BookClub Backend — Rate Limiting Middleware
============================================

What:  Per-IP sliding window limits.
How:   Each (window, IP) pair keeps a deque of request timestamps. On every
       request timestamps older than the window are dropped from the left; if
       the deque is still full the request is rejected with 429 and a
       Retry-After equal to the time until the oldest entry expires.

Windows:
    general   every path except health/docs   RATE_LIMIT_REQUESTS per RATE_LIMIT_WINDOW
    login     POST /members/login only        LOGIN_RATE_LIMIT_REQUESTS per LOGIN_RATE_LIMIT_WINDOW

    A login attempt counts against both windows.

State is in-process: with several workers each worker enforces its own
limits.
"""

import logging
import time
from collections import defaultdict, deque
from typing import Deque, Dict, Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.config import settings
from app.exceptions import RateLimitExceededError
from app.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

LOGIN_PATH = "/members/login"


class SlidingWindow:
    """Timestamps of recent requests, keyed by client IP."""

    def __init__(self) -> None:
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)

    def retry_after(self, key: str, limit: int, window: int, now: float) -> Optional[int]:
        """
        Drop hits older than the window and check whether `key` has room.

        Returns:
            None if a request would be allowed, otherwise the seconds until
            a slot frees up. Nothing is recorded.
        """
        hits = self._hits.get(key)
        if not hits:
            return None
        window_start = now - window
        while hits and hits[0] <= window_start:
            hits.popleft()

        if len(hits) >= limit:
            return int(hits[0] + window - now) + 1
        return None

    def record(self, key: str, now: float) -> None:
        self._hits[key].append(now)

    def hit(self, key: str, limit: int, window: int, now: float) -> Optional[int]:
        """Check and, when allowed, record a request for `key`."""
        retry_after = self.retry_after(key, limit, window, now)
        if retry_after is None:
            self.record(key, now)
        return retry_after

    def prune(self, now: float, window: int) -> int:
        """Forget keys with no hits inside the window. Returns how many were dropped."""
        stale = [key for key, hits in self._hits.items() if not hits or hits[-1] <= now - window]
        for key in stale:
            del self._hits[key]
        return len(stale)

    def __len__(self) -> int:
        return len(self._hits)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Excluded paths: /health, /docs, /redoc, /openapi.json
    Rejections: HTTP 429 error envelope with a Retry-After header.
    """

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    # Prune idle IPs whenever a window tracks more keys than this.
    PRUNE_THRESHOLD = 10_000

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self.general = SlidingWindow()
        self.login = SlidingWindow()

    def _limits(self, request: Request) -> Tuple[Tuple[SlidingWindow, int, int], ...]:
        general = (self.general, settings.rate_limit_requests, settings.rate_limit_window)
        if request.method == "POST" and request.url.path == LOGIN_PATH:
            login = (self.login, settings.login_rate_limit_requests, settings.login_rate_limit_window)
            return (login, general)
        return (general,)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()

        limits = self._limits(request)
        # Record in no window unless every window admits the request.
        for window, limit, seconds in limits:
            retry_after = window.retry_after(client_ip, limit, seconds, now)
            if retry_after is not None:
                logger.warning(
                    "Rate limit exceeded for IP %s on %s %s (%d per %ds)",
                    client_ip,
                    request.method,
                    request.url.path,
                    limit,
                    seconds,
                )
                return self._reject(RateLimitExceededError(retry_after=retry_after))

        for window, _, seconds in limits:
            window.record(client_ip, now)
            if len(window) > self.PRUNE_THRESHOLD:
                dropped = window.prune(now, seconds)
                logger.debug("Pruned %d idle rate limit entries", dropped)

        return await call_next(request)

    @staticmethod
    def _reject(exc: RateLimitExceededError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "data": None,
                "message": exc.message,
                "code": exc.code,
                "request_id": request_id_var.get(""),
            },
            headers={"Retry-After": str(exc.retry_after)},
        )
