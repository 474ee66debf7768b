"""Database connection and session management."""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config.settings import get_settings
from .models import Base

logger = logging.getLogger(__name__)


class Database:
    """Database connection manager."""

    def __init__(self, database_url: str | None = None):
        """Initialize database connection.

        Args:
            database_url: Optional database URL. If not provided, uses settings.
        """
        self._url = database_url or get_settings().resolved_database_url

        engine_kwargs: dict = {"echo": False, "pool_pre_ping": True}
        if self._url.startswith("sqlite"):
            # FastAPI runs sync endpoints in a threadpool
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in self._url or self._url == "sqlite://":
                engine_kwargs["poolclass"] = StaticPool
            else:
                # Ensure data directory exists for SQLite
                db_path = self._url.replace("sqlite:///", "")
                Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        self._engine = create_engine(self._url, **engine_kwargs)
        self._session_factory = sessionmaker(
            bind=self._engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

    @property
    def url(self) -> str:
        return self._url

    def create_tables(self) -> None:
        """Create all database tables."""
        Base.metadata.create_all(self._engine)

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Get a database session context manager.

        Usage:
            with db.session() as session:
                session.add(email)
        """
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


# Global database instance
_db: Database | None = None


def get_db() -> Database:
    """Get or create the global database instance."""
    global _db
    if _db is None:
        _db = Database()
        _db.create_tables()
        logger.info(f"Using {get_settings().storage_label} storage")
    return _db


def init_db(database_url: str | None = None) -> Database:
    """Initialize a new database instance.

    Args:
        database_url: Optional database URL override.

    Returns:
        Database instance.
    """
    global _db
    _db = Database(database_url)
    _db.create_tables()
    return _db
