"""FastAPI application factory.

API layer:
- Validates inputs, reads the cache, triggers refreshes
- Returns payloads for the chart UI
- Forbidden: aggregation logic, direct SQL
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Generator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from elokline.core.config import Settings
from elokline.db.repo import DbSession
from elokline.db.session import get_session, init_db
from elokline.providers.base import GameSourceBase
from elokline.providers.lichess import LichessGameSource


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Settings read once from the environment."""
    return Settings.from_env()


def get_db_session() -> Generator[DbSession, None, None]:
    """Dependency to get database session.

    Yields:
        Database session that is automatically closed after request.
    """
    session = get_session(get_settings().db_path)
    try:
        yield session
    finally:
        session.close()


def get_game_source() -> GameSourceBase:
    """Dependency providing the Lichess game source."""
    settings = get_settings()
    return LichessGameSource(
        base_url=settings.lichess_base_url,
        token=settings.lichess_token,
        timeout=settings.request_timeout_s,
    )


@asynccontextmanager
async def _lifespan(app: FastAPI):
    init_db(get_settings().db_path)
    yield


def create_app() -> FastAPI:
    """Create FastAPI application.

    Returns:
        Configured FastAPI application.
    """
    app = FastAPI(
        title="elokline API",
        description="Daily rating candlesticks from Lichess game history",
        version="0.1.0",
        lifespan=_lifespan,
    )

    # Add CORS middleware for UI access
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:8080",  # webpack dev server
            "http://127.0.0.1:8080",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routes
    from elokline.api.routes import export, history

    app.include_router(history.router, prefix="/api")
    app.include_router(export.router, prefix="/api")

    # Health check endpoint
    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {"status": "ok"}

    return app


# Default app instance
app = create_app()
