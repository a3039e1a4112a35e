"""
FastAPI application entry point for the tool directory API.

``create_app`` builds an app bound to one database file; the database pool
and response cache live on ``app.state`` for the lifetime of the app.
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from toolnav import __version__
from toolnav.api.deps import DatabasePool
from toolnav.api.errors import register_exception_handlers
from toolnav.api.routes import categories, health, search, settings as settings_routes, tools
from toolnav.core.cache import TimestampedCache
from toolnav.core.config import Settings, load_settings

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the API application.

    Parameters
    ----------
    settings : Settings, optional
        Defaults to ``load_settings()`` (TOOLNAV_* environment variables)
    """
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        On startup, open the pool and make sure the schema exists.
        On shutdown, close every connection the pool handed out.
        """
        app.state.databases = DatabasePool(settings)
        app.state.cache = TimestampedCache(ttl=settings.cache_ttl)

        # Schema creation and statement preparation happen here, not on the first request
        app.state.databases.get()
        logger.info("Serving tool directory from %s", settings.db_path)

        yield

        app.state.databases.close_all()
        app.state.cache.invalidate()

    app = FastAPI(title="toolnav API", version=__version__, lifespan=lifespan)
    app.state.settings = settings

    cors_origins = os.getenv(
        "CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"
    ).split(",")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in cors_origins],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(settings_routes.router, prefix="/api", tags=["settings"])
    app.include_router(tools.router, prefix="/api", tags=["tools"])
    app.include_router(categories.router, prefix="/api", tags=["categories"])
    app.include_router(search.router, prefix="/api", tags=["search"])
    app.include_router(health.router, prefix="/api", tags=["health"])

    return app
