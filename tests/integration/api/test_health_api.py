"""
Integration Tests for health, root info and unknown routes.
"""

from unittest.mock import AsyncMock, patch


class TestHealth:
    async def test_connected(self, client):
        response = await client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "OK"
        assert body["message"] == "Notes API is running successfully"
        assert body["database"] == "connected"
        assert body["version"] == "1.0.0"
        assert body["uptime"] >= 0

    async def test_disconnected_still_answers_200(self, client):
        down = AsyncMock(side_effect=ConnectionRefusedError("db down"))
        with patch("notes_api.api.health.ping_database", new=down):
            response = await client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["database"] == "disconnected"


class TestRoot:
    async def test_anonymous(self, client):
        body = (await client.get("/")).json()

        assert body["message"] == "Notes API"
        assert body["endpoints"]["notes"] == "/api/notes"
        assert "user" not in body

    async def test_names_the_caller(self, client, auth_headers):
        body = (await client.get("/", headers=auth_headers)).json()
        assert body["user"] == "grace_hopper"

    async def test_bad_token_is_anonymous(self, client):
        body = (await client.get("/", headers={"Authorization": "Bearer junk"})).json()
        assert "user" not in body


class TestUnknownRoute:
    async def test_404_envelope(self, client, api):
        body = api.assert_error(await client.get("/api/nowhere"), 404, "Route not found")
        assert body["message"] == "The requested route GET /api/nowhere does not exist"

    async def test_responses_carry_a_request_id(self, client):
        response = await client.get("/api/health")
        assert response.headers.get("x-request-id")
