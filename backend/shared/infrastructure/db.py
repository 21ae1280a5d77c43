"""
Database configuration and session management.
Uses SQLAlchemy 2.0 patterns.
"""

import os
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.orm.exc import StaleDataError

from shared.config.settings import DATABASE_URL
from shared.utils.exceptions import ConcurrencyError


def _calculate_pool_size() -> int:
    """
    Calculate pool size based on CPU cores.
    Formula: (2 * CPU cores) + 1, capped at 20.
    """
    cores = os.cpu_count() or 4
    return min(cores * 2 + 1, 20)


def engine_options(url: str) -> dict[str, Any]:
    """Connection options per backend. SQLite rejects the pool sizing arguments."""
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False, "timeout": 30}}
    return {
        "pool_pre_ping": True,  # Verify connections before using
        "pool_size": _calculate_pool_size(),
        "max_overflow": 15,
        "pool_timeout": 30,  # Wait max 30s for connection from pool
        "pool_recycle": 1800,  # Recycle connections after 30 minutes
        "connect_args": {"connect_timeout": 10},
    }


engine = create_engine(DATABASE_URL, echo=False, **engine_options(DATABASE_URL))

# Session factory
SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
)


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency for database sessions.

    Usage:
        @router.get("/sessions")
        def list_sessions(db: Session = Depends(get_db)):
            ...

    The session is automatically closed after the request completes.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """
    Context manager for database sessions outside of FastAPI.

    Usage:
        with get_db_context() as db:
            TableSessionService(db).list_sessions()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when the driver reports a unique index violation (PostgreSQL or SQLite)."""
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate is not None:
        return sqlstate == UNIQUE_VIOLATION
    return "UNIQUE constraint failed" in str(orig)


def atomic_commit(db: Session, operation: str) -> None:
    """
    Flush and commit a read-modify-write, rolling back on failure.

    Version mismatches (StaleDataError) and unique index violations are
    reported as ConcurrencyError so the caller can re-read and retry.
    Other integrity violations (CHECK, foreign key) propagate unchanged.
    """
    try:
        db.flush()
        db.commit()
    except StaleDataError as exc:
        db.rollback()
        raise ConcurrencyError(operation, type(exc).__name__) from exc
    except IntegrityError as exc:
        db.rollback()
        if is_unique_violation(exc):
            raise ConcurrencyError(operation, type(exc).__name__) from exc
        raise
    except Exception:
        db.rollback()
        raise
