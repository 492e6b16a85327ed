"""Security headers and rate limiting middleware."""

import math
import time
from collections.abc import Callable
from dataclasses import dataclass

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from core.config import RateLimitSettings

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "cross-origin",
    "X-DNS-Prefetch-Control": "off",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add conservative security headers to every response."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        for key, value in SECURITY_HEADERS.items():
            response.headers.setdefault(key, value)
        return response


@dataclass
class _Window:
    started: float
    count: int


class FixedWindowRateLimiter:
    """Count hits per client key in fixed windows."""

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, _Window] = {}

    def hit(self, key: str) -> float | None:
        """Record a hit; return seconds until reset if the key is over the limit."""
        now = self._clock()
        window = self._windows.get(key)
        if window is None or now - window.started >= self.window_seconds:
            self._prune(now)
            window = _Window(started=now, count=0)
            self._windows[key] = window

        window.count += 1
        if window.count > self.max_requests:
            return self.window_seconds - (now - window.started)
        return None

    def _prune(self, now: float) -> None:
        expired = [k for k, w in self._windows.items() if now - w.started >= self.window_seconds]
        for key in expired:
            del self._windows[key]


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reject clients exceeding the request budget on the proxied paths."""

    def __init__(
        self,
        app: ASGIApp,
        settings: RateLimitSettings,
        paths: tuple[str, ...] = ("/proxy",),
        limiter: FixedWindowRateLimiter | None = None,
    ) -> None:
        super().__init__(app)
        self._settings = settings
        self._paths = paths
        self._limiter = limiter or FixedWindowRateLimiter(
            settings.max_requests, settings.window_seconds
        )

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method == "OPTIONS" or not request.url.path.startswith(self._paths):
            return await call_next(request)

        client = request.client.host if request.client else "unknown"
        retry_after = self._limiter.hit(client)
        if retry_after is not None:
            return JSONResponse(
                {"error": self._settings.message},
                status_code=429,
                headers={"Retry-After": str(math.ceil(retry_after))},
            )
        return await call_next(request)
