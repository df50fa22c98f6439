from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware


def _validate_env() -> None:
    """
    Validate all required environment variables at startup.

    Runs before any service or database connection is initialised.
    Raises RuntimeError listing every missing variable so the operator can
    fix all problems in one restart cycle.

    Rules:
    - No empty-string values are accepted.
    - A target store URL is required (DATABASE_URL, LOCAL_DATABASE_URL or
      CLOUD_DATABASE_URL).
    - REFERENCE_DATABASE_URL and JWT_SECRET are required.
    """

    from db.config import load_env_files

    load_env_files()

    errors: list[str] = []

    # --- Target store URL -----------------------------------------------
    database_urls = [
        os.getenv(name, "").strip()
        for name in ("DATABASE_URL", "LOCAL_DATABASE_URL", "CLOUD_DATABASE_URL")
    ]
    if not any(database_urls):
        errors.append(
            "No database URL configured. Set DATABASE_URL, LOCAL_DATABASE_URL "
            "or CLOUD_DATABASE_URL."
        )

    # --- Reference store URL --------------------------------------------
    if not os.getenv("REFERENCE_DATABASE_URL", "").strip():
        errors.append("REFERENCE_DATABASE_URL is not set. Client and tag lookups need it.")

    # --- Token secret ---------------------------------------------------
    if not os.getenv("JWT_SECRET", "").strip():
        errors.append("JWT_SECRET is not set. Empty strings are not permitted.")

    if errors:
        raise RuntimeError(
            "Startup validation failed: missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _check_db() -> None:
    """Open a session and run SELECT 1. Raises RuntimeError if the DB is unreachable."""
    from db.session import check_database_connection

    if not check_database_connection():
        raise RuntimeError("Database unavailable.")


def _check_reference_db() -> bool:
    """Probe the reference store. Tag lookups degrade per request when it is down."""
    from sqlalchemy import text
    from sqlalchemy.exc import SQLAlchemyError

    from db.session import ReferenceSessionLocal

    try:
        db = ReferenceSessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
    except SQLAlchemyError:
        return False
    return True


def _check_schema() -> None:
    """
    Compare Base.metadata table names against the live DB schema.

    Every table registered on Base.metadata must exist in the database.
    If any are missing, log a critical error and abort startup so that
    the operator is forced to run migrations before serving traffic.

    Does NOT auto-migrate.
    """
    from sqlalchemy import inspect as sa_inspect

    import db.models  # noqa: F401 registers all ORM models on Base.metadata
    from db.base import Base
    from db.session import get_engine

    inspector = sa_inspect(get_engine())
    actual: set[str] = set(inspector.get_table_names())
    expected: set[str] = set(Base.metadata.tables.keys())
    missing = expected - actual

    if missing:
        log = logging.getLogger(__name__)
        log.critical(
            "Schema mismatch: %d table(s) defined in ORM metadata are absent from "
            "the database: %s. Run 'alembic upgrade head' and restart.",
            len(missing),
            ", ".join(sorted(missing)),
        )
        raise RuntimeError(
            f"Schema mismatch: {len(missing)} table(s) missing from the database "
            f"({', '.join(sorted(missing))}). Run migrations and restart."
        )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Validate target store connectivity and schema on boot."""
    log = logging.getLogger(__name__)
    _check_db()
    log.info("Database connectivity confirmed")
    _check_schema()
    log.info("Database schema validated")
    if _check_reference_db():
        log.info("Reference database connectivity confirmed")
    else:
        log.warning("Reference database unreachable; tag lookups and CSV validation will fail until it recovers")
    yield


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    from app.config import get_api_settings

    application = FastAPI(
        title="Pacing Targets API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=list(get_api_settings().cors_allow_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from app.api.routers import auth_router, tags_router, targets_router, upload_router

    application.include_router(auth_router)
    application.include_router(targets_router)
    application.include_router(tags_router)
    application.include_router(upload_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
