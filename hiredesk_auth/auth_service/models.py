from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Index, JSON, CheckConstraint
from datetime import datetime
from .db import Base
from sqlalchemy.orm import relationship
import uuid


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    company_name = Column(String(255), nullable=False)
    password = Column(String(255), nullable=False)
    files_uploaded = Column(Integer, default=0, server_default="0", nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    refresh_token = relationship(
        "RefreshToken", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint("files_uploaded >= 0", name="ck_users_files_uploaded_non_negative"),
    )

    def to_public_dict(self) -> dict:
        """Serialize the user for API responses. Never includes the password hash."""
        return {
            "id": str(self.id),
            "name": self.name,
            "email": self.email,
            "company_name": self.company_name,
            "filesUploaded": self.files_uploaded or 0,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


class RefreshToken(Base):
    """
    Stored refresh token. One row per user: issuing a new token overwrites
    the row, so only the latest token validates.
    """
    __tablename__ = "refresh_tokens"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    token_hash = Column(String(64), index=True, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="refresh_token")


class AuthEvent(Base):
    __tablename__ = "auth_events"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    email = Column(String, nullable=False)
    event_type = Column(String(32), nullable=False)
    ip_address = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)
    event_metadata = Column(JSON, nullable=True)

    __table_args__ = (
        Index('ix_auth_events_user_id', 'user_id'),
        Index('ix_auth_events_timestamp', 'timestamp'),
        Index('ix_auth_events_event_type', 'event_type'),
        Index('ix_auth_events_user_id_timestamp', 'user_id', 'timestamp'),
    )

    def to_dict(self) -> dict:
        """
        Serialize AuthEvent to dictionary for API responses.

        Returns:
            Dictionary with all event fields, UUIDs as strings,
            datetimes in ISO 8601 format
        """
        return {
            "id": str(self.id),
            "user_id": self.user_id,
            "email": self.email,
            "event_type": self.event_type,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "metadata": self.event_metadata or {}
        }
