"""
Tests for health, root and error-handling behaviour shared by all endpoints.
"""

import pytest
from httpx import ASGITransport, AsyncClient


@pytest.mark.unit
class TestHealthEndpoints:
    async def test_health_check(self, client: AsyncClient) -> None:
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "livevote-api"}

    async def test_root_reports_app_name(self, client: AsyncClient) -> None:
        response = await client.get("/")
        assert response.json()["name"] == "LiveVote"


@pytest.mark.unit
class TestErrorResponses:
    async def test_application_errors_share_one_body_shape(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/groups/missing")

        assert response.status_code == 404
        assert response.json() == {
            "detail": "Group not found",
            "code": "GROUP_NOT_FOUND",
            "errors": ["Group not found"],
            "retryable": False,
        }

    async def test_requests_before_startup_get_503(self) -> None:
        from main import create_application

        bare_app = create_application()
        async with AsyncClient(transport=ASGITransport(app=bare_app), base_url="http://test") as ac:
            response = await ac.get("/api/v1/config")

        assert response.status_code == 503
