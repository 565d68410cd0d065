"""
Unit Tests for HTTP Middleware.

Tests RequestContextMiddleware (request id, timing header) and
RequestTimeoutMiddleware (503 envelope when the budget is exceeded).
"""

import asyncio
from unittest.mock import patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from notes_api.core.middleware import RequestContextMiddleware, RequestTimeoutMiddleware


def _build_app(timeout_seconds: float = 5.0) -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestTimeoutMiddleware, timeout_seconds=timeout_seconds)
    app.add_middleware(RequestContextMiddleware, log_requests=True)

    @app.get("/fast")
    async def fast():
        return {"ok": True}

    @app.get("/slow")
    async def slow():
        await asyncio.sleep(1)
        return {"ok": True}

    return app


async def _client(app: FastAPI) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


class TestRequestContextMiddleware:
    """Tests for RequestContextMiddleware."""

    async def test_generates_request_id(self):
        async with await _client(_build_app()) as client:
            response = await client.get("/fast")

        assert len(response.headers["X-Request-ID"]) == 36

    async def test_propagates_request_id(self):
        async with await _client(_build_app()) as client:
            response = await client.get("/fast", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"

    async def test_sets_response_time(self):
        async with await _client(_build_app()) as client:
            response = await client.get("/fast")

        assert response.headers["X-Response-Time"].endswith("ms")


class TestRequestTimeoutMiddleware:
    """Tests for RequestTimeoutMiddleware."""

    async def test_fast_request_passes(self):
        async with await _client(_build_app(timeout_seconds=0.5)) as client:
            response = await client.get("/fast")

        assert response.status_code == 200

    async def test_slow_request_is_abandoned_with_503(self):
        async with await _client(_build_app(timeout_seconds=0.05)) as client:
            response = await client.get("/slow")

        body = response.json()
        assert response.status_code == 503
        assert body["success"] is False
        assert body["error"] == "Request timeout"
        assert body["statusCode"] == 503

    async def test_timeout_response_still_gets_request_id(self):
        async with await _client(_build_app(timeout_seconds=0.05)) as client:
            response = await client.get("/slow", headers={"X-Request-ID": "req-slow"})

        assert response.headers["X-Request-ID"] == "req-slow"

    async def test_timeout_carries_the_unavailable_code(self):
        with patch(
            "notes_api.core.exception_handlers._detailed_errors_enabled", return_value=True,
        ):
            async with await _client(_build_app(timeout_seconds=0.05)) as client:
                response = await client.get("/slow")

        assert response.status_code == 503
        assert response.json()["details"] == {"code": "SYS_UNAVAILABLE"}

    @pytest.mark.parametrize("scope_type", ["lifespan", "websocket"])
    async def test_non_http_scopes_pass_through(self, scope_type):
        seen = []

        async def inner(scope, receive, send):
            seen.append(scope["type"])

        middleware = RequestTimeoutMiddleware(inner, timeout_seconds=0.01)
        await middleware({"type": scope_type}, None, None)

        assert seen == [scope_type]
