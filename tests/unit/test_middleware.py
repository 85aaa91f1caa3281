"""
Unit Tests - API Middleware
"""
import httpx
import pytest
from fastapi import FastAPI

from marketplace_reports.serving.api.middleware import RateLimitMiddleware


def _limited_app(max_requests: int) -> FastAPI:
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, max_requests=max_requests, window_seconds=60)

    @app.get("/ping")
    async def ping():
        return {"ok": True}

    return app


class TestRateLimitMiddleware:
    """Tests for RateLimitMiddleware"""

    async def test_limit_exceeded(self):
        transport = httpx.ASGITransport(app=_limited_app(max_requests=2))
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            first = await client.get("/ping")
            await client.get("/ping")
            third = await client.get("/ping")

        assert first.status_code == 200
        assert first.headers["X-RateLimit-Remaining"] == "1"
        assert third.status_code == 429
        assert third.headers["Retry-After"] == "60"

    def test_idle_clients_dropped(self):
        limiter = RateLimitMiddleware(FastAPI(), max_requests=5, window_seconds=60)
        limiter._requests["10.0.0.1"] = [100.0]
        limiter._requests["10.0.0.2"] = [100.0, 150.0]

        limiter._prune(current_time=165.0)

        assert "10.0.0.1" not in limiter._requests
        assert limiter._requests["10.0.0.2"] == [150.0]

    @pytest.mark.parametrize("clients", [1, 50])
    def test_prune_empties_map_after_window(self, clients):
        limiter = RateLimitMiddleware(FastAPI(), max_requests=5, window_seconds=60)
        for i in range(clients):
            limiter._requests[f"10.0.1.{i}"] = [float(i)]

        limiter._prune(current_time=1000.0)

        assert len(limiter._requests) == 0
