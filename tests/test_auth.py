"""Tests for registration, login and token checks."""

import sqlite3

from conftest import API

from carvault_api.app.core.config import settings
from carvault_api.app.core.security import create_access_token


def _register(client, email="alice@carvault.io", password="secret123", name="Alice"):
    return client.post(
        f"{API}/auth/register",
        json={"name": name, "email": email, "password": password},
    )


class TestRegister:
    def test_register_returns_user_and_token(self, client):
        response = _register(client)
        assert response.status_code == 201
        body = response.json()
        assert body["user"]["email"] == "alice@carvault.io"
        assert body["user"]["name"] == "Alice"
        assert body["token"]
        assert "password" not in body["user"]

    def test_email_is_stored_lower_case(self, client):
        response = _register(client, email="Alice@CarVault.IO")
        assert response.json()["user"]["email"] == "alice@carvault.io"

    def test_duplicate_email_rejected_case_insensitively(self, client):
        assert _register(client).status_code == 201
        response = _register(client, email="ALICE@carvault.io")
        assert response.status_code == 400
        assert response.json()["kind"] == "EmailTaken"

    def test_invalid_email_rejected(self, client):
        response = _register(client, email="not-an-email")
        assert response.status_code == 400
        assert response.json()["kind"] == "ValidationError"

    def test_short_password_rejected(self, client):
        response = _register(client, password="abc")
        assert response.status_code == 400
        assert response.json()["kind"] == "ValidationError"

    def test_blank_name_rejected(self, client):
        response = _register(client, name="   ")
        assert response.status_code == 400

    def test_password_is_not_persisted_in_plain_text(self, client):
        _register(client, password="secret123")
        conn = sqlite3.connect(settings.database_url)
        try:
            stored = conn.execute("SELECT password FROM users").fetchone()[0]
        finally:
            conn.close()
        assert stored != "secret123"
        assert "secret123" not in stored


class TestLogin:
    def test_login_returns_working_token(self, client):
        _register(client)
        response = client.post(
            f"{API}/auth/login", json={"email": "alice@carvault.io", "password": "secret123"}
        )
        assert response.status_code == 200
        token = response.json()["token"]
        me = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["email"] == "alice@carvault.io"

    def test_login_email_case_insensitive(self, client):
        _register(client)
        response = client.post(
            f"{API}/auth/login", json={"email": "ALICE@carvault.io", "password": "secret123"}
        )
        assert response.status_code == 200

    def test_wrong_password_and_unknown_email_look_the_same(self, client):
        _register(client)
        wrong = client.post(f"{API}/auth/login", json={"email": "alice@carvault.io", "password": "nope123"})
        unknown = client.post(f"{API}/auth/login", json={"email": "eve@carvault.io", "password": "secret123"})
        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json() == unknown.json()
        assert wrong.json()["kind"] == "Unauthorized"


class TestProtectedEndpoints:
    def test_missing_token_is_unauthorized(self, client):
        response = client.get(f"{API}/cars/")
        assert response.status_code == 401
        assert response.json()["kind"] == "Unauthorized"

    def test_garbage_token_is_unauthorized(self, client):
        response = client.get(f"{API}/cars/", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401

    def test_expired_token_is_unauthorized(self, client):
        user_id = _register(client).json()["user"]["id"]
        token = create_access_token({"sub": user_id}, expires_delta=-1)
        response = client.get(f"{API}/cars/", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_token_for_unknown_user_is_unauthorized(self, client):
        token = create_access_token({"sub": "0" * 32})
        response = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["message"] == "User no longer exists"
