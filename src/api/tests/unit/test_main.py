"""Unit tests for main FastAPI application configuration."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from fastapi import status
from fastapi.testclient import TestClient


@pytest.fixture
def client() -> TestClient:
    """TestClient without running the lifespan."""
    from main import app

    return TestClient(app)


class TestHealthEndpoints:
    """Tests for the health endpoints."""

    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"status": "ok"}

    def test_health_db_connected(self, client: TestClient) -> None:
        with patch("main.check_database", AsyncMock(return_value=True)):
            response = client.get("/health/db")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"status": "ok", "connected": True}

    def test_health_db_unreachable_is_503(self, client: TestClient) -> None:
        with patch("main.check_database", AsyncMock(return_value=False)):
            response = client.get("/health/db")

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json() == {"status": "unhealthy", "connected": False}


class TestApplication:
    """Tests for application wiring."""

    def test_registration_routes_mounted(self) -> None:
        from main import app

        paths = {route.path for route in app.routes}

        assert "/registrar/registrations" in paths
        assert "/registrar/registrations/{registration_id}" in paths
        assert "/registrar/registrations/{registration_id}/status-reports" in paths

    def test_lifespan_releases_resources(self) -> None:
        from main import app

        with (
            patch("main.configure_logging") as configure_logging,
            patch("main.close_http_clients", AsyncMock()) as close_http_clients,
            patch(
                "main.close_database_connections", AsyncMock()
            ) as close_database_connections,
        ):
            with TestClient(app):
                configure_logging.assert_called_once()

        close_http_clients.assert_awaited_once()
        close_database_connections.assert_awaited_once()
