from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI

from app.logging_utils import configure_logging


def _validate_env() -> None:
    """
    Validate environment variables at startup.

    Runs before any service or database connection is initialised.
    Raises RuntimeError listing every invalid variable so the operator can
    fix all problems in one restart cycle.

    The remote credential and project id are not required to boot: runs
    are rejected individually while they are missing.
    """

    from db.config import load_env_files

    load_env_files()

    errors: list[str] = []

    for name in (
        "TRANSLATION_SYNC_SCHEDULE_HOUR",
        "TRANSLATION_SYNC_SCHEDULE_MINUTE",
        "TRANSLATION_SYNC_EXPORT_MAX_RETRIES",
        "TRANSLATION_SYNC_STORAGE_BATCH_SIZE",
    ):
        raw = os.getenv(name, "").strip()
        if raw and not raw.lstrip("-").isdigit():
            errors.append(f"{name}='{raw}' is not an integer.")

    schedule_enabled = os.getenv("TRANSLATION_SYNC_SCHEDULE_ENABLED", "false").strip().lower()
    if schedule_enabled in {"1", "true", "yes", "on"}:
        if not os.getenv("POEDITOR_API_KEY", "").strip():
            errors.append(
                "POEDITOR_API_KEY is not set but TRANSLATION_SYNC_SCHEDULE_ENABLED is true."
            )
        if not os.getenv("POEDITOR_PROJECT_ID", "").strip():
            errors.append(
                "POEDITOR_PROJECT_ID is not set but TRANSLATION_SYNC_SCHEDULE_ENABLED is true."
            )

    if errors:
        raise RuntimeError(
            "Startup validation failed. Missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _check_db() -> None:
    """Open a session and run SELECT 1. Raises RuntimeError if the DB is unreachable."""
    from sqlalchemy import text

    from db.session import SessionLocal

    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
    except Exception as exc:
        raise RuntimeError("Database unavailable.") from exc


def _check_schema() -> None:
    """
    Compare Base.metadata table names against the live DB schema.

    Every table registered on Base.metadata must exist in the database.
    If any are missing, log a critical error and abort startup so that
    the operator is forced to run migrations before serving traffic.

    Does NOT auto-migrate.
    """
    from sqlalchemy import inspect as sa_inspect

    import db.models  # noqa: F401  registers all ORM models on Base.metadata
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
    """Validate DB connectivity and schema, start the scheduler on boot; shut it down on exit."""
    _check_db()
    logging.getLogger(__name__).info("Database connectivity confirmed")
    _check_schema()
    logging.getLogger(__name__).info("Database schema validated")

    from app.scheduler.jobs import build_scheduler

    scheduler = build_scheduler()
    scheduler.start()
    logging.getLogger(__name__).info("Scheduler started with %d jobs", len(scheduler.get_jobs()))
    try:
        yield
    finally:
        scheduler.shutdown(wait=True)
        logging.getLogger(__name__).info("Scheduler shut down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    configure_logging()

    application = FastAPI(
        title="Translation Sync API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import translation_sync_router

    application.include_router(translation_sync_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
