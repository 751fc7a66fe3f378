"""
Configuration management for the auth service
"""
import re
from datetime import timedelta
from functools import lru_cache
from typing import List

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

JWT_ALGORITHM = "HS256"
MIN_SECRET_LENGTH = 32

# Development-only secrets; rejected when ENVIRONMENT=production
DEV_ACCESS_SECRET = "dev-access-secret-change-me-0123456789abcdef"  # pragma: allowlist secret
DEV_REFRESH_SECRET = "dev-refresh-secret-change-me-0123456789abcdef"  # pragma: allowlist secret

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_DURATION_UNITS = {"": "seconds", "s": "seconds", "m": "minutes", "h": "hours", "d": "days"}


def parse_duration(value: str) -> timedelta:
    """
    Parse an expiry string such as "15m", "7d", "12h" or "900".

    Raises:
        ValueError: If the string is not a positive duration
    """
    match = _DURATION_RE.match(str(value))
    if not match:
        raise ValueError(f"Invalid duration '{value}'. Use <number>[s|m|h|d]")
    amount, unit = int(match.group(1)), match.group(2)
    if amount <= 0:
        raise ValueError(f"Duration must be positive, got '{value}'")
    return timedelta(**{_DURATION_UNITS[unit]: amount})


class Settings(BaseSettings):
    """Auth service configuration loaded from environment variables"""

    # Server Configuration
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "./logs"
    DEV_MODE: bool = False
    SERVICE_NAME: str = "hiredesk-auth"

    # Database Configuration (SQLite, PostgreSQL or MySQL/MariaDB; others are rejected at startup)
    DATABASE_URL: str = "sqlite:///./hiredesk_auth.db"
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_ECHO: bool = False

    # JWT Configuration
    JWT_ACCESS_SECRET: str = DEV_ACCESS_SECRET
    JWT_REFRESH_SECRET: str = DEV_REFRESH_SECRET
    JWT_ACCESS_EXPIRES_IN: str = "15m"
    JWT_REFRESH_EXPIRES_IN: str = "7d"

    # Password policy
    PASSWORD_HASH_ROUNDS: int = 29000
    PASSWORD_MIN_LENGTH: int = 8

    # Upload counters
    UPLOAD_LIMIT: int = 10

    # Refresh cookie
    REFRESH_COOKIE_NAME: str = "refreshToken"
    REFRESH_COOKIE_PATH: str = "/api/auth"
    REFRESH_COOKIE_SAMESITE: str = "strict"

    # CORS Configuration
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("JWT_ACCESS_SECRET", "JWT_REFRESH_SECRET")
    @classmethod
    def _check_secret_length(cls, v: str, info) -> str:
        if len(v) < MIN_SECRET_LENGTH:
            raise ValueError(f"{info.field_name} must be at least {MIN_SECRET_LENGTH} characters long")
        return v

    @field_validator("JWT_ACCESS_EXPIRES_IN", "JWT_REFRESH_EXPIRES_IN")
    @classmethod
    def _check_duration(cls, v: str) -> str:
        parse_duration(v)
        return v

    @model_validator(mode="after")
    def _check_production_secrets(self) -> "Settings":
        if self.JWT_ACCESS_SECRET == self.JWT_REFRESH_SECRET:
            raise ValueError("JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must differ")
        if self.is_production and (
            self.JWT_ACCESS_SECRET == DEV_ACCESS_SECRET or self.JWT_REFRESH_SECRET == DEV_REFRESH_SECRET
        ):
            raise ValueError("JWT secrets must be set explicitly in production")
        return self

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() in ("prod", "production")

    @property
    def access_token_ttl(self) -> timedelta:
        return parse_duration(self.JWT_ACCESS_EXPIRES_IN)

    @property
    def refresh_token_ttl(self) -> timedelta:
        return parse_duration(self.JWT_REFRESH_EXPIRES_IN)


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
