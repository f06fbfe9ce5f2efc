"""Tests for health endpoints."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from app.main import app


@pytest.fixture
def client():
    with patch("app.main.TemporalClient.connect", AsyncMock(side_effect=RuntimeError("no temporal"))):
        with TestClient(app, raise_server_exceptions=False) as test_client:
            yield test_client


class TestLivenessEndpoint:
    """Tests for /health liveness endpoint."""

    def test_health_check_returns_ok(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestReadinessEndpoint:
    """Tests for /health/ready readiness endpoint."""

    def test_readiness_all_ok(self, client, mock_db_session):
        with patch("app.routes.health.AsyncSessionLocal", return_value=mock_db_session):
            app.state.temporal = MagicMock()
            response = client.get("/health/ready")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "checks": {"database": "ok", "temporal": "ok"}}

    def test_readiness_db_failure(self, client, mock_db_session):
        mock_db_session.execute = AsyncMock(
            side_effect=OperationalError("SELECT 1", {}, Exception("Connection refused"))
        )
        with patch("app.routes.health.AsyncSessionLocal", return_value=mock_db_session):
            app.state.temporal = MagicMock()
            response = client.get("/health/ready")

        assert response.status_code == 503
        assert "error" in response.json()["checks"]["database"]

    def test_readiness_temporal_not_connected(self, client, mock_db_session):
        with patch("app.routes.health.AsyncSessionLocal", return_value=mock_db_session):
            app.state.temporal = None
            response = client.get("/health/ready")

        assert response.status_code == 503
        assert response.json()["checks"]["temporal"] == "not connected"
