"""
Tests for the liveness and readiness endpoints.
"""
from hiredesk_auth.auth_service.routes import health


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200

    body = response.json()
    assert body["status"] == "OK"
    assert body["service"] == "hiredesk-auth"
    assert body["uptime"] >= 0
    assert "timestamp" in body


def test_ready_with_database(client):
    response = client.get("/ready")
    assert response.status_code == 200
    assert response.json()["database"] == "connected"


def test_ready_without_database(client, monkeypatch):
    monkeypatch.setattr(health, "check_db_connection", lambda: False)

    response = client.get("/ready")
    assert response.status_code == 503
    assert response.json()["status"] == "not_ready"
    assert response.json()["database"] == "disconnected"


def test_process_time_header(client):
    response = client.get("/health")
    assert float(response.headers["x-process-time"]) >= 0
