"""
Daily Diet Backend — Application Plumbing Tests
=================================================

What:  Request ids, rate limiting, error bodies and the health check.
"""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from dailydiet.database import Database
from dailydiet.main import create_app
from dailydiet.middleware.rate_limit import RateLimitMiddleware
from dailydiet.middleware.request_id import RequestIDMiddleware


class TestRequestID:

    @pytest.mark.asyncio
    async def test_generated_when_absent(self, client):
        response = await client.get("/api/meals")
        assert len(response.headers["x-request-id"]) == 8

    @pytest.mark.asyncio
    async def test_client_value_is_echoed(self, client):
        response = await client.get("/api/meals", headers={"X-Request-ID": "trace-42"})
        assert response.headers["x-request-id"] == "trace-42"

    @pytest.mark.asyncio
    async def test_error_body_carries_the_id(self, anonymous_client):
        response = await anonymous_client.get("/api/meals", headers={"X-Request-ID": "trace-401"})

        assert response.status_code == 401
        assert response.json()["request_id"] == "trace-401"


class TestRateLimit:

    def _app(self, limit=2):
        app = FastAPI()
        app.add_middleware(RateLimitMiddleware, max_requests=limit, window_seconds=60)
        app.add_middleware(RequestIDMiddleware)

        @app.get("/ping")
        async def ping():
            return {"ok": True}

        @app.get("/health")
        async def health():
            return {"status": "healthy"}

        return app

    @pytest.mark.asyncio
    async def test_third_request_in_window_is_429(self):
        async with AsyncClient(transport=ASGITransport(app=self._app()), base_url="http://test") as c:
            assert (await c.get("/ping")).status_code == 200
            assert (await c.get("/ping")).status_code == 200
            response = await c.get("/ping")

        assert response.status_code == 429
        assert response.json()["error"] == "rate_limit_exceeded"
        assert int(response.headers["retry-after"]) >= 1
        assert "x-request-id" in response.headers

    @pytest.mark.asyncio
    async def test_idle_ip_sweep_runs_at_most_once_per_interval(self, monkeypatch):
        sweeps = []
        monkeypatch.setattr(RateLimitMiddleware, "CLEANUP_THRESHOLD", 0)
        monkeypatch.setattr(
            RateLimitMiddleware,
            "_cleanup_inactive_ips",
            lambda self, window_start: sweeps.append(window_start),
        )

        async with AsyncClient(transport=ASGITransport(app=self._app(limit=100)), base_url="http://test") as c:
            for _ in range(5):
                assert (await c.get("/ping")).status_code == 200

        assert len(sweeps) == 1

    @pytest.mark.asyncio
    async def test_health_is_never_limited(self):
        async with AsyncClient(transport=ASGITransport(app=self._app()), base_url="http://test") as c:
            statuses = [(await c.get("/health")).status_code for _ in range(5)]
        assert statuses == [200] * 5


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy_with_database(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_health_needs_no_session(self, anonymous_client):
        response = await anonymous_client.get("/health")
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_unhealthy_when_database_not_initialized(self, tmp_path):
        app = create_app(database=Database(f"sqlite+aiosqlite:///{tmp_path / 'never.db'}"))
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            response = await c.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"
        assert response.json()["database"] == "not_initialized"


class TestDatabaseLifecycle:

    @pytest.mark.asyncio
    async def test_init_is_idempotent_and_teardown_resets(self, tmp_path):
        database = Database(f"sqlite+aiosqlite:///{tmp_path / 'lifecycle.db'}")
        assert not database.is_initialized

        await database.init()
        engine = database.engine
        await database.init()
        assert database.engine is engine

        await database.teardown()
        assert not database.is_initialized
        with pytest.raises(RuntimeError):
            database.engine
