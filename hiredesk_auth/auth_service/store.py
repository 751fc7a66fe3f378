"""
Credential store: persistence of users and refresh tokens.

Operations that other requests may race on (refresh-token supersession,
upload counter increments) are issued as single SQL statements.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.orm import Session

from .db import UnsupportedDatabase
from .models import RefreshToken, User


def _naive_utc(value: datetime) -> datetime:
    """Columns hold naive UTC datetimes."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class CredentialStore:
    def __init__(self, db: Session):
        self.db = db

    @property
    def dialect(self):
        return self.db.get_bind().dialect

    # ---------------- Users ----------------

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.execute(select(User).where(User.email == email)).scalar_one_or_none()

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def create_user(self, name: str, email: str, company_name: str, password_hash: str) -> User:
        user = User(
            name=name,
            email=email,
            company_name=company_name,
            password=password_hash,
            files_uploaded=0,
        )
        self.db.add(user)
        self.db.flush()
        return user

    def update_password(self, user: User, password_hash: str) -> None:
        user.password = password_hash
        user.updated_at = datetime.utcnow()
        self.db.flush()

    def update_name(self, user: User, name: str) -> None:
        user.name = name
        user.updated_at = datetime.utcnow()
        self.db.flush()

    def increment_uploads(self, email: str) -> Optional[int]:
        """
        Atomically add one to the user's upload counter.

        Returns:
            The counter value after the increment, or None if no user has this email
        """
        stmt = (
            update(User)
            .where(User.email == email)
            .values(files_uploaded=User.files_uploaded + 1, updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        if self.dialect.update_returning:
            row = self.db.execute(stmt.returning(User.files_uploaded)).first()
            return row[0] if row else None

        result = self.db.execute(stmt)
        if result.rowcount == 0:
            return None
        return self.db.execute(select(User.files_uploaded).where(User.email == email)).scalar_one()

    # ---------------- Refresh tokens ----------------

    def store_refresh_token(self, user_id: int, token_hash: str, expires_at: datetime) -> None:
        """Insert or overwrite the single refresh-token row of a user in one statement."""
        expires_at = _naive_utc(expires_at)
        values = {
            "user_id": user_id,
            "token_hash": token_hash,
            "expires_at": expires_at,
            "created_at": datetime.utcnow(),
        }
        changes = {key: values[key] for key in ("token_hash", "expires_at", "created_at")}

        name = self.dialect.name
        if name in ("postgresql", "sqlite"):
            insert = postgresql.insert if name == "postgresql" else sqlite.insert
            stmt = insert(RefreshToken).values(**values).on_conflict_do_update(
                index_elements=[RefreshToken.user_id],
                set_=changes,
            )
        elif name in ("mysql", "mariadb"):
            stmt = mysql.insert(RefreshToken).values(**values).on_duplicate_key_update(**changes)
        else:
            raise UnsupportedDatabase(name)

        self.db.execute(stmt)

    def rotate_refresh_token(self, user_id: int, current_hash: str, new_hash: str, expires_at: datetime) -> bool:
        """
        Replace the stored token with a new one, but only while `current_hash`
        is still the live, unexpired token of the user.

        Returns:
            True if this call performed the swap. Of several callers presenting
            the same token, exactly one gets True.
        """
        now = datetime.utcnow()
        result = self.db.execute(
            update(RefreshToken)
            .where(
                RefreshToken.user_id == user_id,
                RefreshToken.token_hash == current_hash,
                RefreshToken.expires_at > now,
            )
            .values(token_hash=new_hash, expires_at=_naive_utc(expires_at), created_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def get_refresh_token(self, user_id: int) -> Optional[RefreshToken]:
        return self.db.execute(
            select(RefreshToken).where(RefreshToken.user_id == user_id)
        ).scalar_one_or_none()

    def revoke_refresh_tokens(self, user_id: int) -> int:
        result = self.db.execute(
            delete(RefreshToken)
            .where(RefreshToken.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def revoke_refresh_token_by_hash(self, token_hash: str) -> Optional[int]:
        """Delete the row holding this token hash. Returns the owning user id, if any."""
        row = self.db.execute(
            select(RefreshToken.user_id).where(RefreshToken.token_hash == token_hash)
        ).first()
        if row is None:
            return None
        self.db.execute(
            delete(RefreshToken)
            .where(RefreshToken.token_hash == token_hash)
            .execution_options(synchronize_session=False)
        )
        return row[0]
