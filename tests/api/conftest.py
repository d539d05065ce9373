"""Shared fixtures for API tests."""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from storecatalog.infrastructure import database as database_module
from storecatalog.infrastructure.config import settings
from storecatalog.infrastructure.database import Database
from storecatalog.main import app


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch) -> Generator[TestClient, None, None]:
    """Create a test client backed by a fresh in-memory database.

    The client runs the application lifespan, which creates the schema.
    """
    monkeypatch.setattr(database_module, "_database", Database("sqlite+aiosqlite://"))
    monkeypatch.setattr(settings, "database_create_tables", True)

    with TestClient(app) as client:
        yield client


@pytest.fixture
def create_category(client: TestClient):
    """Create a category through the API and return its data."""

    def factory(name: str, **fields) -> dict:
        response = client.post("/api/categories/create-category", json={"name": name, **fields})
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return factory


@pytest.fixture
def create_product(client: TestClient):
    """Create a product through the API and return its data."""

    def factory(name: str, price: float, category: str, **fields) -> dict:
        response = client.post(
            "/api/products/create-product",
            json={"name": name, "price": price, "category": category, **fields},
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return factory
