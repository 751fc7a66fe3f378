"""
Unit tests for the credential store.
"""
from datetime import datetime, timedelta, timezone

import pytest

from hiredesk_auth.auth_service.models import RefreshToken
from hiredesk_auth.auth_service.store import CredentialStore


@pytest.fixture
def store(db_session):
    return CredentialStore(db_session)


@pytest.fixture
def user(store, db_session):
    created = store.create_user(
        name="Dana Scully", email="dana@example.com", company_name="FBI", password_hash="not-a-real-hash"
    )
    db_session.commit()
    return created


def test_store_refresh_token_keeps_one_row(store, user, db_session):
    expires = datetime.now(timezone.utc) + timedelta(days=7)
    store.store_refresh_token(user.id, "a" * 64, expires)
    store.store_refresh_token(user.id, "b" * 64, expires)
    db_session.commit()

    rows = db_session.query(RefreshToken).filter(RefreshToken.user_id == user.id).all()
    assert len(rows) == 1
    assert rows[0].token_hash == "b" * 64


def test_store_refresh_token_normalizes_to_naive_utc(store, user, db_session):
    expires = datetime(2030, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))
    store.store_refresh_token(user.id, "c" * 64, expires)
    db_session.commit()

    stored = store.get_refresh_token(user.id)
    assert stored.expires_at == datetime(2030, 1, 1, 10, 0)


def test_revoke_refresh_token_by_hash(store, user, db_session):
    store.store_refresh_token(user.id, "d" * 64, datetime.now(timezone.utc) + timedelta(days=1))
    db_session.commit()

    assert store.revoke_refresh_token_by_hash("e" * 64) is None
    assert store.revoke_refresh_token_by_hash("d" * 64) == user.id
    db_session.commit()
    assert store.get_refresh_token(user.id) is None


def test_increment_uploads(store, user, db_session):
    assert store.increment_uploads("dana@example.com") == 1
    assert store.increment_uploads("dana@example.com") == 2
    db_session.commit()

    db_session.refresh(user)
    assert user.files_uploaded == 2


def test_increment_uploads_unknown_email(store):
    assert store.increment_uploads("nobody@example.com") is None


def test_rotate_refresh_token_only_once(store, user, db_session):
    expires = datetime.now(timezone.utc) + timedelta(days=7)
    store.store_refresh_token(user.id, "a" * 64, expires)
    db_session.commit()

    assert store.rotate_refresh_token(user.id, "a" * 64, "b" * 64, expires) is True
    assert store.rotate_refresh_token(user.id, "a" * 64, "c" * 64, expires) is False
    db_session.commit()

    assert store.get_refresh_token(user.id).token_hash == "b" * 64


def test_rotate_refresh_token_rejects_expired(store, user, db_session):
    store.store_refresh_token(user.id, "a" * 64, datetime.now(timezone.utc) - timedelta(seconds=1))
    db_session.commit()

    assert store.rotate_refresh_token(user.id, "a" * 64, "b" * 64, datetime.now(timezone.utc) + timedelta(days=7)) is False


def test_rotate_refresh_token_without_stored_row(store, user):
    assert store.rotate_refresh_token(user.id, "a" * 64, "b" * 64, datetime.now(timezone.utc)) is False
