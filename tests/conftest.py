"""Shared fixtures: a fresh SQLite file per test and an API client."""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from carvault_api.app.core.clock import get_today
from carvault_api.app.core.config import settings
from carvault_api.app.core.db import init_db
from carvault_api.app.main import app


TODAY = date(2025, 6, 1)

API = "/api/v1"


@pytest.fixture
def database(tmp_path, monkeypatch):
    """Point the app at an empty database file and migrate it."""
    monkeypatch.setattr(settings, "database_url", str(tmp_path / "carvault-test.db"))
    monkeypatch.setattr(settings, "on_car_delete", "orphan")
    init_db()
    return settings.database_url


@pytest.fixture
def client(database):
    """Test client with the clock pinned to ``TODAY``."""
    app.dependency_overrides[get_today] = lambda: TODAY
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    """Register a user and return the Authorization headers for it."""

    def _register(email="alice@carvault.io", name="Alice", password="secret123"):
        response = client.post(
            f"{API}/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        assert response.status_code == 201, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _register


@pytest.fixture
def alice(register):
    return register("alice@carvault.io", "Alice")


@pytest.fixture
def bob(register):
    return register("bob@carvault.io", "Bob")


def car_payload(**overrides):
    payload = {
        "make": "Toyota",
        "model": "Camry",
        "year": 2022,
        "color": "Blue",
        "licensePlate": "abc123",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_car(client):
    """Create a car for the given headers and return its JSON."""

    def _make_car(headers, **overrides):
        response = client.post(f"{API}/cars/", json=car_payload(**overrides), headers=headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _make_car
