"""Tests for health check endpoints."""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from storecatalog.infrastructure import database as database_module
from storecatalog.infrastructure.database import Database
from storecatalog.main import app


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch) -> Generator[TestClient, None, None]:
    """Create test client on an in-memory database."""
    monkeypatch.setattr(database_module, "_database", Database("sqlite+aiosqlite://"))

    with TestClient(app) as client:
        yield client


def test_health_check(client: TestClient) -> None:
    """Test health endpoint returns healthy status."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "store-catalog-api"
    assert "version" in data


def test_readiness_check(client: TestClient) -> None:
    """Test readiness endpoint returns ready status."""
    response = client.get("/ready")
    assert response.status_code == 200
    assert response.json()["status"] == "ready"


def test_readiness_check_without_database(client: TestClient, monkeypatch) -> None:
    """Test readiness endpoint reports an unreachable database."""

    async def broken_ping(self) -> None:
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    monkeypatch.setattr(Database, "ping", broken_ping)

    response = client.get("/ready")
    assert response.status_code == 503
    assert response.json()["status"] == "unavailable"
