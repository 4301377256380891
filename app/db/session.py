"""Database session management for the Contentify issuer.

This module provides SQLAlchemy engine and session management:
- engine: The SQLAlchemy engine connected to the database
- SessionLocal: Session factory for creating database sessions
- get_db(): FastAPI dependency for request-scoped sessions
- get_db_session(): Context manager for non-request code
- check_database(): Connectivity probe used by /health

PostgreSQL in production, SQLite fallback for local development.
"""

import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.config import DATABASE_URL

log = logging.getLogger(__name__)


def _engine_kwargs(url: str) -> dict:
    """Engine options per backend."""
    if url.startswith("sqlite"):
        from sqlalchemy.pool import StaticPool

        return {
            "echo": False,
            "pool_pre_ping": True,
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    return {
        "echo": False,
        "pool_pre_ping": True,      # Verify connections before use
        "pool_size": 5,              # Base pool size
        "max_overflow": 10,          # Additional connections if needed
        "pool_recycle": 1800,        # Recycle connections every 30 min
    }


def build_engine(url: str) -> Engine:
    """Create an engine for ``url`` with the SQLite PRAGMA hook attached."""
    new_engine = create_engine(url, **_engine_kwargs(url))

    if url.startswith("sqlite"):
        @event.listens_for(new_engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            """Enforce foreign keys so ON DELETE CASCADE works on SQLite."""
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return new_engine


engine = build_engine(DATABASE_URL)

# Session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency for database sessions.

    Usage:
        @router.get("/endpoint")
        def endpoint(db: Session = Depends(get_db)):
            ...

    The session is automatically closed when the request completes.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """Context manager for database sessions in non-request code.

    The session is committed on success and rolled back on exception.
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def check_database(db: Session) -> bool:
    """Return True if the database answers a trivial query."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        log.warning(f"Database health check failed: {e}")
        return False


def init_database(bind: Engine | None = None) -> None:
    """Create all tables and seed the default AI providers.

    Called during application startup in the lifespan handler. Tables are
    created idempotently and seeding skips providers that already exist.
    """
    from app.db.models import Base
    from app.db.seed import seed_default_providers

    bind = bind or engine
    url = bind.url.render_as_string(hide_password=True)
    log.info(f"Initializing database at {url}")

    Base.metadata.create_all(bind=bind)

    factory = sessionmaker(autocommit=False, autoflush=False, bind=bind)
    db = factory()
    try:
        added = seed_default_providers(db)
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

    log.info(f"Database tables ready ({added} providers seeded)")


def close_database() -> None:
    """Dispose of the connection pool."""
    engine.dispose()
    log.info("Database connection pool closed")
