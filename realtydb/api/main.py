"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import DatabaseConfig, load_environment
from ..drivers.database import Database, connect_config
from ..errors import ConfigurationError
from .routes import health, translate

logger = logging.getLogger(__name__)


def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Build the application.

    Args:
        database: Database to serve. When omitted the pool is opened from
            DATABASE_URL at startup and closed at shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = False
        app.state.database = database
        if app.state.database is None:
            load_environment()
            try:
                app.state.database = await connect_config(DatabaseConfig.from_env())
                owned = True
            except ConfigurationError as e:
                logger.warning(f"Starting without a database: {e}")
        try:
            yield
        finally:
            if owned:
                await app.state.database.close()

    app = FastAPI(
        title="realtydb API",
        description="Health checks and SQL translation previews for the site database",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, prefix="/api/health", tags=["health"])
    app.include_router(translate.router, prefix="/api/translate", tags=["translate"])
    return app
