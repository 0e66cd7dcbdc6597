"""Database connection and session management.

This module provides engine construction, the process-wide session factory,
and the schema and health helpers used by the HTTP API and main.py.
"""

import subprocess
import sys
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from pal_occupy.config import Settings, get_settings
from pal_occupy.models import Base


def _configure_sqlite(
    dbapi_connection: Any, connection_record: Any  # noqa: ARG001
) -> None:
    """Enable WAL journaling and foreign keys on every new SQLite connection.

    Args:
        dbapi_connection: The DBAPI connection
        connection_record: Connection record (required by SQLAlchemy event API)
    """
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


def create_db_engine(settings: Settings | None = None) -> Engine:
    """Create and configure the database engine.

    Args:
        settings: Settings to read the URL and pool options from; defaults to
            the cached application settings.

    Returns:
        Engine: Configured SQLAlchemy engine

    Note:
        In-memory SQLite shares a single connection across threads so that
        every session sees the same database.
    """
    settings = settings or get_settings()
    url = settings.database_url

    if url.startswith("sqlite"):
        options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if _is_memory_sqlite(url):
            options["poolclass"] = StaticPool
        engine = create_engine(url, echo=settings.database_echo, pool_pre_ping=True, **options)
        event.listen(engine, "connect", _configure_sqlite)
    else:
        # PostgreSQL in production: honor pool settings
        engine = create_engine(
            url,
            echo=settings.database_echo,
            pool_pre_ping=True,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_recycle=settings.database_pool_recycle,
            pool_timeout=settings.database_pool_timeout,
        )

    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Return a session factory bound to ``engine``."""

    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


# Global engine and session factory
_engine: Engine | None = None
_SessionLocal: sessionmaker[Session] | None = None


def get_engine() -> Engine:
    """Get or create the global database engine."""
    global _engine  # noqa: PLW0603
    if _engine is None:
        _engine = create_db_engine()
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """Get or create the global session factory."""
    global _SessionLocal  # noqa: PLW0603
    if _SessionLocal is None:
        _SessionLocal = create_session_factory(get_engine())
    return _SessionLocal


def init_db(engine: Engine | None = None) -> None:
    """Create all tables directly from the model metadata.

    Note:
        Used by tests and local SQLite setups. Deployments run
        ``alembic upgrade head`` instead.
    """
    Base.metadata.create_all(bind=engine or get_engine())


def run_migrations(project_root: Path | None = None) -> None:
    """Apply alembic migrations up to head using the current interpreter."""
    root = project_root or Path(__file__).parent.parent.parent
    subprocess.run(
        [sys.executable, "-m", "alembic", "upgrade", "head"],
        check=True,
        cwd=root,
    )


def check_database_health(engine: Engine | None = None) -> bool:
    """Check if the database is reachable.

    Returns:
        bool: True if a trivial query succeeds, False otherwise
    """
    try:
        with (engine or get_engine()).connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False

