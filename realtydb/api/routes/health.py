"""Health check endpoints."""

import logging
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from ... import __version__
from ..models import DatabaseHealthResponse, HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(status="healthy", version=__version__)


@router.get("/db", response_model=DatabaseHealthResponse)
async def database_health(request: Request):
    """Check that the database answers ``SELECT 1``."""
    database = getattr(request.app.state, "database", None)
    if database is None:
        return JSONResponse(
            status_code=503,
            content=DatabaseHealthResponse(status="unconfigured").model_dump(mode="json"),
        )

    try:
        ok = await database.ping()
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return JSONResponse(
            status_code=503,
            content=DatabaseHealthResponse(
                status="unhealthy",
                backend=database.backend.describe(),
                dialect=database.dialect.value,
                error=str(e),
            ).model_dump(mode="json"),
        )

    return DatabaseHealthResponse(
        status="healthy" if ok else "unhealthy",
        backend=database.backend.describe(),
        dialect=database.dialect.value,
    )
