"""
db/session.py

SQLAlchemy engine and session factory for listing persistence.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from db.config import env_flag, env_int, resolve_database_url


def create_db_engine() -> Engine:
    database_url = resolve_database_url()
    if not database_url.startswith("postgresql"):
        raise RuntimeError("Only PostgreSQL URLs are supported.")

    return create_engine(
        database_url,
        echo=env_flag("SQL_ECHO", default=False),
        pool_pre_ping=True,
        pool_recycle=env_int("DB_POOL_RECYCLE", 1800),
        pool_size=env_int("DB_POOL_SIZE", 2),
        max_overflow=env_int("DB_MAX_OVERFLOW", 2),
    )


_engine: Engine | None = None
_session_factory: sessionmaker | None = None


def get_engine() -> Engine:
    """Return the shared engine, creating it on first call."""
    global _engine
    if _engine is None:
        _engine = create_db_engine()
    return _engine


def _get_session_factory() -> sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(
            bind=get_engine(),
            class_=Session,
            autoflush=False,
            expire_on_commit=False,
        )
    return _session_factory


def SessionLocal() -> Session:
    """Lazy session factory. Drop-in replacement for a sessionmaker() call."""
    return _get_session_factory()()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Yield a session that is always closed; committing is the caller's job."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
