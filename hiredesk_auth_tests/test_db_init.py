"""Tests for database initialization."""
import os
import tempfile
from unittest.mock import Mock

import pytest
from sqlalchemy import create_engine, inspect

import hiredesk_auth.auth_service.db as db_module
from hiredesk_auth.auth_service.db import UnsupportedDatabase, check_db_connection, init_db


def test_init_db_creates_tables():
    """init_db creates users, refresh_tokens and auth_events with their key columns."""
    with tempfile.NamedTemporaryFile(delete=False, suffix=".db") as tmp:
        tmp_db_path = tmp.name

    test_engine = create_engine(f"sqlite:///{tmp_db_path}", connect_args={"check_same_thread": False})
    original_engine = db_module.engine
    db_module.engine = test_engine
    try:
        init_db()

        inspector = inspect(test_engine)
        tables = inspector.get_table_names()
        assert {"users", "refresh_tokens", "auth_events"} <= set(tables)

        user_columns = {col["name"]: col for col in inspector.get_columns("users")}
        for name in ["id", "name", "email", "company_name", "password", "files_uploaded", "created_at"]:
            assert name in user_columns, f"Column {name} should exist in users table"
        assert user_columns["files_uploaded"]["nullable"] is False

        token_columns = {col["name"] for col in inspector.get_columns("refresh_tokens")}
        assert {"user_id", "token_hash", "expires_at"} <= token_columns

        unique_columns = [set(u["column_names"]) for u in inspector.get_unique_constraints("refresh_tokens")]
        unique_indexes = [set(i["column_names"]) for i in inspector.get_indexes("refresh_tokens") if i["unique"]]
        assert {"user_id"} in unique_columns + unique_indexes, "one refresh token row per user"
    finally:
        db_module.engine = original_engine
        test_engine.dispose()
        os.unlink(tmp_db_path)


def test_check_db_connection():
    assert check_db_connection() is True


def test_check_db_connection_unreachable(monkeypatch):
    broken = create_engine("sqlite:////nonexistent-dir/for/sure/test.db")
    monkeypatch.setattr(db_module, "engine", broken)
    assert db_module.check_db_connection() is False


def test_init_db_rejects_unsupported_dialect(monkeypatch):
    unsupported = Mock()
    unsupported.dialect.name = "mssql"
    monkeypatch.setattr(db_module, "engine", unsupported)

    with pytest.raises(UnsupportedDatabase, match="mssql"):
        init_db()
    unsupported.connect.assert_not_called()
