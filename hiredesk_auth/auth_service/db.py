"""
Database connection and session management for the auth service
"""
from typing import Generator
import logging

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from .config import settings

logger = logging.getLogger(__name__)

# Dialects with a single-statement upsert for refresh tokens
SUPPORTED_DIALECTS = ("sqlite", "postgresql", "mysql", "mariadb")


class UnsupportedDatabase(RuntimeError):
    def __init__(self, dialect_name: str):
        super().__init__(
            f"Database dialect '{dialect_name}' is not supported; "
            f"use one of: {', '.join(SUPPORTED_DIALECTS)}"
        )
        self.dialect_name = dialect_name


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # Writers wait on the SQLite file lock instead of failing immediately
        return {"connect_args": {"check_same_thread": False, "timeout": 30}}
    return {
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_pre_ping": True,
    }


engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DB_ECHO,
    **_engine_options(settings.DATABASE_URL),
)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
Base = declarative_base()


def init_db() -> None:
    """
    Initialize database by creating all tables.
    Called from the application lifespan on startup.

    Raises:
        UnsupportedDatabase: If DATABASE_URL points at a dialect outside SUPPORTED_DIALECTS
    """
    if engine.dialect.name not in SUPPORTED_DIALECTS:
        raise UnsupportedDatabase(engine.dialect.name)

    # Import models so they are registered with Base
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database initialized: %s", engine.url.render_as_string(hide_password=True))


def get_db() -> Generator[Session, None, None]:
    """
    Dependency function to get database session.

    Yields:
        Session: SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_connection() -> bool:
    """
    Check if database connection is working.

    Opens a fresh connection on every call, so the answer reflects the
    store's state at the time of the check.

    Returns:
        bool: True if connection is successful, False otherwise
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error("Database connection check failed: %s", e)
        return False
