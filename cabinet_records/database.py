"""Database configuration, session management and transaction scope."""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator

import sqlalchemy.exc
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .core.config import settings

logger = logging.getLogger(__name__)

DATABASE_URL = settings.database_url


def is_postgresql() -> bool:
    """Check if the configured database is PostgreSQL."""
    return DATABASE_URL.startswith("postgresql")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite defaults foreign_keys to OFF; CASCADE constraints are ignored without it.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, **kwargs):
    """Create an engine with database-specific tuning."""
    if url.startswith("sqlite"):
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        new_engine = create_engine(url, connect_args=connect_args, **kwargs)
        event.listen(new_engine, "connect", _enable_sqlite_foreign_keys)
        return new_engine

    return create_engine(
        url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_recycle=settings.db_pool_recycle,
        pool_pre_ping=True,
        **kwargs,
    )


engine = build_engine(DATABASE_URL)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create base class for models
Base = declarative_base()


def get_db():
    """Yield a session, rolling back on unhandled exceptions.

    The connection is returned to the pool in a clean state either way.
    """
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """Run a block as one transaction: commit on success, roll back on error.

    A failed rollback is logged and swallowed so the caller always sees the
    original error.
    """
    try:
        yield db
        db.commit()
    except Exception:
        try:
            db.rollback()
        except sqlalchemy.exc.SQLAlchemyError as rollback_error:
            logger.error("Rollback failed: %s", rollback_error)
        raise


def utcnow() -> datetime:
    """Timezone-aware current time used for Python-side column defaults."""
    return datetime.now(timezone.utc)
