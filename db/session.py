"""
db/session.py

SQLAlchemy engines and session factories for the target and reference stores.

Engines are created on first use so importing this module never opens a
connection.
"""

from __future__ import annotations

import os
from collections.abc import Generator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from db.config import resolve_database_url, resolve_reference_database_url


def _get_bool_env(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def create_db_engine(database_url: str) -> Engine:
    if not database_url.startswith("postgresql"):
        raise RuntimeError("Only PostgreSQL URLs are supported.")

    return create_engine(
        database_url,
        echo=_get_bool_env("SQL_ECHO", default=False),
        pool_pre_ping=True,
        pool_recycle=_get_int_env("DB_POOL_RECYCLE", 1800),
        pool_size=_get_int_env("DB_POOL_SIZE", 5),
        max_overflow=_get_int_env("DB_MAX_OVERFLOW", 10),
    )


_engine: Engine | None = None
_session_factory: sessionmaker | None = None
_reference_engine: Engine | None = None
_reference_session_factory: sessionmaker | None = None


def get_engine() -> Engine:
    """Return the shared target store engine, creating it on first call."""
    global _engine
    if _engine is None:
        _engine = create_db_engine(resolve_database_url())
    return _engine


def get_reference_engine() -> Engine:
    """Return the shared reference store engine, creating it on first call."""
    global _reference_engine
    if _reference_engine is None:
        _reference_engine = create_db_engine(resolve_reference_database_url())
    return _reference_engine


def _get_session_factory() -> sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(
            bind=get_engine(),
            class_=Session,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )
    return _session_factory


def _get_reference_session_factory() -> sessionmaker:
    global _reference_session_factory
    if _reference_session_factory is None:
        _reference_session_factory = sessionmaker(
            bind=get_reference_engine(),
            class_=Session,
            autocommit=False,
            autoflush=False,
        )
    return _reference_session_factory


def SessionLocal() -> Session:
    """Lazy target store session factory."""
    return _get_session_factory()()


def ReferenceSessionLocal() -> Session:
    """Lazy reference store session factory."""
    return _get_reference_session_factory()()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_reference_db() -> Generator[Session, None, None]:
    db = ReferenceSessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_database_connection() -> bool:
    """Run SELECT 1 against the target store and report whether it answered."""
    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
    except (SQLAlchemyError, RuntimeError):
        return False
    return True
