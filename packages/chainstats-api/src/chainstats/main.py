"""FastAPI application factory and entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from chainstats import __version__
from chainstats.config import get_settings
from chainstats.db.engine import dispose_engine, init_db
from chainstats.errors import (
    ComputeFailure,
    InsufficientHistory,
    NonMonotonicCounter,
    UnknownMetric,
)
from chainstats.routers import health, stats
from chainstats.services.cache import CacheCoordinator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup and shutdown."""
    # Startup
    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if settings.environment == "development" else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting chainstats API v%s in %s mode", __version__, settings.environment)

    settings.validate_production()

    # Create tables (for SQLite dev mode; production reads the indexer database)
    if settings.environment == "development":
        await init_db()
        logger.info("Database tables created/verified")

    yield

    # Shutdown
    app.state.cache.clear()
    await dispose_engine()
    logger.info("chainstats API shut down")


async def _unknown_metric_handler(request: Request, exc: UnknownMetric) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc)},
    )


async def _insufficient_history_handler(
    request: Request, exc: InsufficientHistory
) -> JSONResponse:
    if isinstance(exc, NonMonotonicCounter):
        logger.warning("Ledger integrity problem on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": str(exc), "status": "pending"},
    )


async def _compute_failure_handler(request: Request, exc: ComputeFailure) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": str(exc)},
    )


async def _store_failure_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Snapshot store read failed on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": "Snapshot store unavailable"},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    docs_url = "/docs" if settings.environment == "development" else None
    redoc_url = "/redoc" if settings.environment == "development" else None
    openapi_url = "/openapi.json" if settings.environment == "development" else None

    app = FastAPI(
        title="chainstats API",
        description="Ledger statistics and provider capacity for chain dashboards",
        version=__version__,
        lifespan=lifespan,
        docs_url=docs_url,
        redoc_url=redoc_url,
        openapi_url=openapi_url,
    )

    # One cache per process, shared by every request
    app.state.cache = CacheCoordinator()

    origins = [o.strip() for o in settings.cors_origins.split(",")]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=False,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        return response

    app.add_exception_handler(UnknownMetric, _unknown_metric_handler)
    app.add_exception_handler(InsufficientHistory, _insufficient_history_handler)
    app.add_exception_handler(ComputeFailure, _compute_failure_handler)
    app.add_exception_handler(SQLAlchemyError, _store_failure_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(stats.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "chainstats.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=(settings.environment == "development"),
    )
