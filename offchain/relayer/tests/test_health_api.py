"""
Tests for the /health endpoint.
"""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from unified_relayer.api import create_app
from unified_relayer.chains import build_chains
from unified_relayer.config import MonitorConfig


def make_config(sepolia_rpc: str = "", arbitrum_rpc: str = "") -> MonitorConfig:
    # No credentials, so the lifespan starts no monitors
    return MonitorConfig(
        unified_address="",
        relayer_private_key="",
        chains=build_chains(sepolia_rpc, arbitrum_rpc),
    )


@pytest.fixture
def client():
    """Create test client with only sepolia configured."""
    with TestClient(create_app(make_config(sepolia_rpc="http://localhost:8545"))) as test_client:
        yield test_client


class TestHealthCheck:
    """Tests for /health endpoint."""

    def test_health_check_returns_status(self, client):
        """Health check should return the fixed marker."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert set(data) == {"status", "timestamp", "monitoredChains"}

    def test_timestamp_is_iso_datetime(self, client):
        timestamp = client.get("/health").json()["timestamp"]

        parsed = datetime.fromisoformat(timestamp)
        assert parsed.tzinfo is not None

    def test_lists_only_chains_with_rpc_url(self, client):
        assert client.get("/health").json()["monitoredChains"] == ["sepolia"]

    def test_no_chains_configured(self):
        with TestClient(create_app(make_config())) as test_client:
            response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["monitoredChains"] == []

    def test_both_chains_configured(self):
        config = make_config("http://localhost:8545", "http://localhost:8546")
        with TestClient(create_app(config)) as test_client:
            data = test_client.get("/health").json()

        assert data["monitoredChains"] == ["sepolia", "arbitrum"]

    def test_cors_headers(self, client):
        response = client.get("/health", headers={"Origin": "http://localhost:5173"})
        assert response.headers["access-control-allow-origin"] == "*"


class TestMalformedCredentials:
    """Tests for startup with unusable relayer credentials."""

    def test_health_served_with_malformed_relayer_key(self):
        config = MonitorConfig(
            unified_address="0x5FbDB2315678afecb367f032d93F642f64180aa3",
            relayer_private_key="not-a-key",
            chains=build_chains("http://sepolia.invalid", ""),
        )

        with TestClient(create_app(config)) as test_client:
            response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["monitoredChains"] == ["sepolia"]


class TestLifespan:
    """Tests for monitor start/stop around the server."""

    def test_service_started_and_stopped(self):
        service = MagicMock()
        service.stop = AsyncMock()
        service.monitored_chains = ["sepolia"]

        app = create_app(make_config("http://localhost:8545"), service=service)
        with TestClient(app) as test_client:
            service.start.assert_called_once()
            assert test_client.get("/health").status_code == 200
            service.stop.assert_not_awaited()

        service.stop.assert_awaited_once()
