"""FastAPI application factory for the newsroom admin API."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy.engine import make_url

from app.config import Settings, get_settings
from app.infrastructure.database import Base, engine
from app.infrastructure.logging.log_config import setup_logging
from app.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


async def _ensure_database_exists(settings: Settings) -> None:
    """Create the PostgreSQL database named in DATABASE_URL if it is missing.

    Uses the ``postgres`` maintenance database on the same server. Any other
    backend (SQLite in development and tests) is left alone, and failures are
    logged rather than raised so ``create_all`` reports the real problem.
    """
    url = make_url(settings.database_url)
    if url.get_backend_name() != "postgresql" or not url.database:
        return

    import asyncpg

    maintenance = url.set(drivername="postgresql", database="postgres")
    try:
        conn = await asyncpg.connect(maintenance.render_as_string(hide_password=False))
        try:
            if await conn.fetchval("SELECT 1 FROM pg_database WHERE datname = $1", url.database):
                logger.debug("Database '%s' already exists", url.database)
                return
            # CREATE DATABASE cannot run inside a transaction block
            await conn.execute(f'CREATE DATABASE "{url.database}"')
            logger.info("Created database '%s'", url.database)
        finally:
            await conn.close()
    except Exception as exc:
        logger.warning("Could not auto-create database '%s': %s", url.database, exc)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — prepare the database and the media directory."""
    settings = get_settings()
    setup_logging(settings)

    await _ensure_database_exists(settings)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    Path(settings.upload_dir, "media").mkdir(parents=True, exist_ok=True)
    logger.info("%s %s started (%s)", settings.app_title, settings.app_version, settings.app_env)

    yield

    await engine.dispose()


def create_app() -> FastAPI:
    """Build the FastAPI app: CORS, versioned API routes and the media mount."""
    settings = get_settings()

    app = FastAPI(title=settings.app_title, version=settings.app_version, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router)

    # Uploaded files are served from <upload_dir>/media
    app.mount(
        settings.media_base_url,
        StaticFiles(directory=Path(settings.upload_dir, "media"), check_dir=False),
        name="media",
    )
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=8020, reload=True)
