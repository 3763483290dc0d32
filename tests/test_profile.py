"""Tests for profile endpoints."""

from fastapi.testclient import TestClient


def _auth(test_user: dict) -> dict:
    return {"Authorization": f"Bearer {test_user['token']}"}


class TestProfile:
    """Tests for viewing and updating the profile."""

    def test_get_profile(self, client: TestClient, test_user: dict):
        response = client.get("/api/v1/profile", headers=_auth(test_user))
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == test_user["user_id"]
        assert data["name"] == "Test User"
        assert data["is_active"] is True

    def test_update_name_and_email(self, client: TestClient, test_user: dict):
        response = client.put(
            "/api/v1/profile",
            json={"name": "Renamed", "email": "renamed@example.com"},
            headers=_auth(test_user),
        )
        assert response.status_code == 200
        assert response.json()["email"] == "renamed@example.com"

        # Old password still works with the new email
        login = client.post("/api/v1/auth/login", json={"email": "renamed@example.com", "password": "password123"})
        assert login.status_code == 200

    def test_update_password(self, client: TestClient, test_user: dict):
        response = client.put(
            "/api/v1/profile",
            json={"name": "Test User", "email": "test@example.com", "password": "changed789"},
            headers=_auth(test_user),
        )
        assert response.status_code == 200

        old = client.post("/api/v1/auth/login", json={"email": "test@example.com", "password": "password123"})
        new = client.post("/api/v1/auth/login", json={"email": "test@example.com", "password": "changed789"})
        assert old.status_code == 401
        assert new.status_code == 200

    def test_update_rejects_taken_email(self, client: TestClient, test_user: dict):
        client.post(
            "/api/v1/auth/register",
            json={"name": "Alice", "email": "alice@example.com", "password": "secret1"},
        )
        response = client.put(
            "/api/v1/profile",
            json={"name": "Test User", "email": "alice@example.com"},
            headers=_auth(test_user),
        )
        assert response.status_code == 400
        assert response.json()["detail"]["errors"] == ["Email already taken"]

    def test_update_rejects_weak_password(self, client: TestClient, test_user: dict):
        response = client.put(
            "/api/v1/profile",
            json={"name": "Test User", "email": "test@example.com", "password": "123456"},
            headers=_auth(test_user),
        )
        assert response.status_code == 400
        assert response.json()["detail"]["errors"] == ["Password needs at least one letter"]

    def test_update_requires_auth(self, client: TestClient):
        response = client.put("/api/v1/profile", json={"name": "X", "email": "x@example.com"})
        assert response.status_code == 401
