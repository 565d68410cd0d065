"""
Integration Test Fixtures.

Fixtures for integration tests: the real application wired to the
in-memory test database from the root conftest.
"""

from collections.abc import AsyncGenerator
from typing import Any
from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from notes_api.core.database import get_db_session
from notes_api.core.rate_limiter import InMemoryLoginRateLimiter, get_login_rate_limiter

STRONG_PASSWORD = "Str0ng!Passw0rd"


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def login_rate_limiter() -> InMemoryLoginRateLimiter:
    """A fresh limiter per test so attempts never leak between tests."""
    return InMemoryLoginRateLimiter(max_attempts=5, window_seconds=900)


@pytest.fixture
async def client(
    db_session_factory: async_sessionmaker[AsyncSession],
    login_rate_limiter: InMemoryLoginRateLimiter,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client bound to the test database.

    Each request gets its own session that commits on success and rolls
    back on error, like the production dependency. The lifespan is not
    run, so startup checks and the connect retry are skipped.

    Usage:
        async def test_health_endpoint(client: AsyncClient):
            response = await client.get("/api/health")
            assert response.status_code == 200
    """
    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with db_session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    from notes_api.main import create_app

    app = create_app()
    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_login_rate_limiter] = lambda: login_rate_limiter

    with patch("notes_api.api.health.ping_database", new=AsyncMock(return_value=None)):
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as test_client:
            yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# API Response Assertion Helpers
# =============================================================================


class ApiAssertions:
    """Helper class for API response assertions."""

    @staticmethod
    def assert_success(response: Any, expected_status: int = 200) -> dict[str, Any]:
        """
        Assert the response is a success envelope.

        Returns:
            Response JSON
        """
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        body = response.json()
        assert body.get("success") is True, f"Response not successful: {body}"
        assert "timestamp" in body
        assert "statusCode" not in body
        return body

    @staticmethod
    def assert_error(
        response: Any,
        expected_status: int,
        expected_error: str | None = None,
    ) -> dict[str, Any]:
        """
        Assert the response is an error envelope.

        Returns:
            Response JSON
        """
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        body = response.json()
        assert body.get("success") is False, f"Response should be error: {body}"
        assert body.get("statusCode") == expected_status
        if expected_error is not None:
            assert body.get("error") == expected_error, (
                f"Expected error {expected_error!r}, got {body.get('error')!r}"
            )
        return body


@pytest.fixture
def api() -> ApiAssertions:
    """Provide API assertion helpers."""
    return ApiAssertions()


# =============================================================================
# Data Helpers
# =============================================================================


@pytest.fixture
def create_note(client: AsyncClient):
    """Factory that creates a note through the API and returns its JSON."""

    async def _create(**overrides: Any) -> dict[str, Any]:
        payload = {
            "title": "Sunday notes",
            "content": "Hebrews 11",
            "category": "Sermons",
            "type": "sermon",
        }
        payload.update(overrides)
        response = await client.post("/api/notes", json=payload)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create


@pytest.fixture
def register_user(client: AsyncClient):
    """Factory that registers an account and returns the response data."""

    async def _register(
        username: str = "grace_hopper",
        email: str = "grace@example.com",
        password: str = STRONG_PASSWORD,
    ) -> dict[str, Any]:
        response = await client.post(
            "/api/auth/register",
            json={
                "username": username,
                "email": email,
                "password": password,
                "firstName": "Grace",
                "lastName": "Hopper",
            },
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _register


@pytest.fixture
async def auth_headers(register_user) -> dict[str, str]:
    """
    Bearer headers for a freshly registered account.

    Usage:
        async def test_protected_endpoint(client: AsyncClient, auth_headers: dict):
            response = await client.get("/api/auth/me", headers=auth_headers)
            assert response.status_code == 200
    """
    data = await register_user()
    return {"Authorization": f"Bearer {data['tokens']['accessToken']}"}
