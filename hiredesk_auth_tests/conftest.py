"""
Pytest configuration for auth service tests.

Points the service at a temporary SQLite database and a cheap hash work
factor before any application module is imported.
"""
import os
import tempfile
import uuid

import pytest

_tmp_dir = tempfile.mkdtemp(prefix="hiredesk-auth-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_tmp_dir, 'test.db')}"
os.environ["LOG_DIR"] = os.path.join(_tmp_dir, "logs")
os.environ["PASSWORD_HASH_ROUNDS"] = "1000"
os.environ["ENVIRONMENT"] = "test"
os.environ["DEV_MODE"] = "false"

from fastapi.testclient import TestClient  # noqa: E402

from hiredesk_auth.auth_service.db import Base, engine, SessionLocal  # noqa: E402
from hiredesk_auth.auth_service.main import app  # noqa: E402

TEST_PASSWORD = "Secret123!"  # pragma: allowlist secret


@pytest.fixture(autouse=True)
def reset_database():
    # Drop all tables and recreate them before each test
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db_session():
    session = SessionLocal()
    yield session
    session.close()


def unique_email(prefix: str = "user") -> str:
    return f"{prefix}_{uuid.uuid4().hex[:8]}@example.com"


def register_user(client, email=None, password=TEST_PASSWORD, name="Bob Smith", company_name="Acme"):
    """Register through the API and return (response, email)."""
    email = email or unique_email()
    response = client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "company_name": company_name, "password": password},
    )
    return response, email


def auth_header(access_token: str) -> dict:
    return {"Authorization": f"Bearer {access_token}"}
