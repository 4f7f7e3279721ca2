"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import make_url

from tracker.config import get_settings
from tracker.infrastructure.cache import RedisKeyValueCache
from tracker.infrastructure.database import Base, engine
from tracker.infrastructure.database.seed import seed_demo_data
from tracker.infrastructure.database.session import async_session_factory
from tracker.infrastructure.dependencies import get_key_value_cache
from tracker.infrastructure.logging.log_config import setup_logging
from tracker.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


def _ensure_sqlite_directory(database_url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite" or not url.database or url.database == ":memory:":
        return
    Path(url.database).parent.mkdir(parents=True, exist_ok=True)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — create tables, optionally seed demo data."""
    settings = get_settings()
    setup_logging()

    # 1. Create all database tables
    _ensure_sqlite_directory(settings.database_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # 2. Seed demo projects and tasks
    if settings.seed_demo_data:
        try:
            await seed_demo_data(async_session_factory)
        except Exception:
            logger.exception("Failed to seed demo data — continuing without it")

    logger.info(
        "%s %s started (directory backend: %s, cache backend: %s)",
        settings.app_title,
        settings.app_version,
        settings.directory_backend,
        settings.cache_backend,
    )
    yield

    cache = get_key_value_cache()
    if isinstance(cache, RedisKeyValueCache):
        await cache.close()
    await engine.dispose()


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Mount API routes
    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "tracker.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )
