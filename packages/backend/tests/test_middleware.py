"""Middleware: security headers, request ids, rate limiting.

Redis is never initialized in tests, so the rate limiter passes
requests through; its own behaviour is checked with a fake counter.
"""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from bizdir.middleware import rate_limit
from bizdir.middleware.rate_limit import RateLimitMiddleware


@pytest.mark.asyncio
async def test_security_headers(client):
    r = await client.get("/api/v1/health")
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "DENY"
    assert r.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
    assert "Strict-Transport-Security" not in r.headers


@pytest.mark.asyncio
async def test_request_id_generated_and_unique(client):
    r1 = await client.get("/api/v1/health")
    r2 = await client.get("/api/v1/health")
    assert r1.headers["X-Request-ID"] != r2.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_request_id_propagated(client):
    r = await client.get("/api/v1/health", headers={"X-Request-ID": "trace-123"})
    assert r.headers["X-Request-ID"] == "trace-123"


@pytest.mark.asyncio
async def test_no_rate_limit_headers_without_redis(client):
    r = await client.get("/api/v1/health")
    assert "X-RateLimit-Limit" not in r.headers


class FakeRedis:
    def __init__(self):
        self.counts: dict[str, int] = {}

    async def incr(self, key):
        self.counts[key] = self.counts.get(key, 0) + 1
        return self.counts[key]

    async def expire(self, key, seconds):
        return True


@pytest.mark.asyncio
async def test_login_paths_share_strict_bucket(monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr(rate_limit, "redis_available", lambda: True)
    monkeypatch.setattr(rate_limit, "get_redis", lambda: fake)

    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, default_rpm=100, auth_rpm=2)

    @app.post("/api/v1/agent/auth/login")
    async def agent_login():
        return {"ok": True}

    @app.post("/api/v1/operator/auth/login")
    async def operator_login():
        return {"ok": True}

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        assert (await ac.post("/api/v1/agent/auth/login")).status_code == 200
        assert (await ac.post("/api/v1/operator/auth/login")).status_code == 200
        r = await ac.post("/api/v1/agent/auth/login")

    assert r.status_code == 429
    assert r.headers["Retry-After"] == "60"
    assert r.json()["success"] is False
