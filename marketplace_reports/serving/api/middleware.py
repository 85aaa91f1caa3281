"""
API Middleware

- Request logging with request ids bound to the structlog context
- Rate limiting
- Security headers
"""

import time
from collections import defaultdict
from typing import Callable, Dict, Iterable
import asyncio

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
import structlog

logger = structlog.get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log all requests with timing information"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        request_id = request.headers.get("X-Request-ID", str(time.time_ns()))

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        logger.info(
            "Request started",
            method=request.method,
            path=request.url.path,
            client=request.client.host if request.client else None,
        )

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "Request completed",
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2),
        )

        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        response.headers["X-Request-ID"] = request_id
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter, per client address.

    Paths listed in ``exempt_paths`` (health probes) are never limited.
    """

    def __init__(
        self,
        app,
        max_requests: int = 100,
        window_seconds: int = 60,
        exempt_paths: Iterable[str] = (),
    ):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.exempt_paths = tuple(exempt_paths)
        self._requests: Dict[str, list] = defaultdict(list)
        self._lock = asyncio.Lock()

    def _prune(self, current_time: float) -> None:
        """Drop timestamps outside the window, and clients with none left."""
        for client_id in list(self._requests):
            recent = [t for t in self._requests[client_id] if current_time - t < self.window_seconds]
            if recent:
                self._requests[client_id] = recent
            else:
                del self._requests[client_id]

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if self.exempt_paths and request.url.path.startswith(self.exempt_paths):
            return await call_next(request)

        client_id = request.client.host if request.client else "unknown"
        current_time = time.time()

        async with self._lock:
            self._prune(current_time)

            if len(self._requests[client_id]) >= self.max_requests:
                logger.warning(
                    "Rate limit exceeded",
                    client=client_id,
                    requests=len(self._requests[client_id]),
                )
                return Response(
                    content='{"detail": "Rate limit exceeded"}',
                    status_code=429,
                    media_type="application/json",
                    headers={
                        "Retry-After": str(self.window_seconds),
                        "X-RateLimit-Limit": str(self.max_requests),
                        "X-RateLimit-Remaining": "0",
                    },
                )

            self._requests[client_id].append(current_time)
            remaining = self.max_requests - len(self._requests[client_id])

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        # exported reports are never cached
        if response.headers.get("content-type", "").startswith("application/pdf"):
            response.headers["Cache-Control"] = "no-store"

        return response
