"""
Tests for the profile endpoints and the bearer-token guard.
"""
from datetime import datetime, timedelta, timezone

from hiredesk_auth.auth_service.auth import TokenManager
from hiredesk_auth.auth_service.config import get_settings

from .conftest import auth_header, register_user


def _access_token(response):
    return response.json()["data"]["accessToken"]


def test_get_profile(client):
    registered, email = register_user(client, name="Carol King")
    response = client.get("/api/auth/profile", headers=auth_header(_access_token(registered)))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["email"] == email
    assert data["name"] == "Carol King"
    assert "password" not in data


def test_profile_requires_token(client):
    response = client.get("/api/auth/profile")
    assert response.status_code == 401
    assert response.json() == {
        "success": False,
        "message": "Authentication Required",
        "error": "Access token is required",
    }


def test_profile_rejects_invalid_token(client):
    response = client.get("/api/auth/profile", headers=auth_header("garbage"))
    assert response.status_code == 401
    assert response.json()["message"] == "Authentication Failed"


def test_profile_rejects_expired_token(client):
    registered, _ = register_user(client)
    user_id = registered.json()["data"]["user"]["id"]

    tokens = TokenManager(get_settings())
    stale = tokens.issue_access(int(user_id), "x@example.com", now=datetime.now(timezone.utc) - timedelta(hours=1))

    response = client.get("/api/auth/profile", headers=auth_header(stale))
    assert response.status_code == 401


def test_profile_rejects_token_of_deleted_user(client):
    tokens = TokenManager(get_settings())
    orphan = tokens.issue_access(999999, "ghost@example.com")

    response = client.get("/api/auth/profile", headers=auth_header(orphan))
    assert response.status_code == 401
    assert response.json()["error"] == "User not found"


def test_update_profile_name(client):
    registered, _ = register_user(client)
    headers = auth_header(_access_token(registered))

    response = client.put("/api/auth/update-profile", headers=headers, json={"name": "  New Name  "})
    assert response.status_code == 200
    assert response.json()["data"]["name"] == "New Name"

    assert client.get("/api/auth/profile", headers=headers).json()["data"]["name"] == "New Name"


def test_update_profile_ignores_other_fields(client):
    registered, email = register_user(client, company_name="Acme")
    headers = auth_header(_access_token(registered))

    response = client.put(
        "/api/auth/update-profile",
        headers=headers,
        json={"email": "hijack@example.com", "company_name": "Evil Corp", "filesUploaded": 99, "password": "x"},
    )
    assert response.status_code == 200

    data = response.json()["data"]
    assert data["email"] == email
    assert data["company_name"] == "Acme"
    assert data["filesUploaded"] == 0


def test_update_profile_rejects_empty_name(client):
    registered, _ = register_user(client)
    headers = auth_header(_access_token(registered))

    response = client.put("/api/auth/update-profile", headers=headers, json={"name": "   "})
    assert response.status_code == 400
    assert response.json()["error"] == "Name must be a non-empty string"


def test_update_profile_rejects_long_name(client):
    registered, _ = register_user(client)
    headers = auth_header(_access_token(registered))

    response = client.put("/api/auth/update-profile", headers=headers, json={"name": "n" * 256})
    assert response.status_code == 400
