"""
Design gallery service
Stores named garment designs with one to three reference photos
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Optional
import os
import subprocess
import sys

from shared.core import ServiceHealth, setup_logging, RequestLoggingMiddleware, get_logger
from designs.core_settings import Settings, get_settings
from designs.api.routes import router as designs_router
from designs.application.service import DesignValidationError
from designs.infrastructure.db import Database

SERVICE_NAME = "designs-service"
SERVICE_DESCRIPTION = "Design gallery: garment reference photos"
ALEMBIC_INI = os.path.join(os.path.dirname(__file__), "alembic.ini")

logger = get_logger(__name__)


def run_migrations(database_url: str) -> bool:
    """Upgrade the database at database_url to the latest revision.

    alembic.ini and the revisions ship inside this package, so an installed
    service can migrate without a source checkout.
    """
    logger.info("Running database migrations")
    result = subprocess.run(
        [sys.executable, "-m", "alembic", "-c", ALEMBIC_INI, "upgrade", "head"],
        env={**os.environ, "DATABASE_URL": database_url},
        capture_output=True,
        text=True,
        check=False
    )
    if result.returncode != 0:
        logger.warning(f"Migration output: {result.stderr}")
        return False
    logger.info("Database migrations completed")
    return True


def register_exception_handlers(app: FastAPI) -> None:
    """Every failure is answered as {"error": message}."""

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail},
                            headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def malformed_body(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    @app.exception_handler(DesignValidationError)
    async def invalid_design(request: Request, exc: DesignValidationError):
        logger.info(f"Design rejected: {exc}")
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(SQLAlchemyError)
    async def storage_error(request: Request, exc: SQLAlchemyError):
        logger.error(f"Storage error on {request.method} {request.url.path}", exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Storage unavailable"})


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    Build the service.

    A database handle passed in is used as is (tests hand in an in-memory
    SQLite store); otherwise one is opened from settings at startup and
    disposed at shutdown.
    """
    settings = settings or get_settings()

    setup_logging(
        service_name=SERVICE_NAME,
        level=settings.LOG_LEVEL,
        environment=settings.ENVIRONMENT,
        version=settings.SERVICE_VERSION
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {SERVICE_NAME} version {settings.SERVICE_VERSION}")
        owns_database = app.state.database is None
        if owns_database:
            app.state.database = Database.from_settings(settings)

        if settings.RUN_MIGRATIONS:
            try:
                run_migrations(settings.database_url)
            except OSError as e:
                logger.error(f"Migration error: {e}")

        try:
            app.state.database.init_models()
            logger.info("Database models initialized")
        except SQLAlchemyError:
            logger.error("Failed to initialize database models", exc_info=True)
            raise

        logger.info(f"{SERVICE_NAME} started successfully")

        yield

        logger.info(f"Shutting down {SERVICE_NAME}")
        if owns_database:
            app.state.database.dispose()
            app.state.database = None

    app = FastAPI(
        title=SERVICE_NAME,
        description=SERVICE_DESCRIPTION,
        version=settings.SERVICE_VERSION,
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json"
    )
    app.state.database = database
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    register_exception_handlers(app)

    health_service = ServiceHealth(
        SERVICE_NAME,
        settings.SERVICE_VERSION,
        release_id=settings.RELEASE_ID,
        redis_url=settings.REDIS_URL
    )
    app.include_router(health_service.create_health_router())

    app.include_router(designs_router, prefix="/api")

    @app.get("/api/health")
    async def api_health():
        return {"ok": True}

    @app.get("/")
    async def root():
        return {
            "service": SERVICE_NAME,
            "version": settings.SERVICE_VERSION,
            "status": "running",
            "docs": "/api/docs"
        }

    @app.get("/info")
    async def info():
        return {
            "service": SERVICE_NAME,
            "version": settings.SERVICE_VERSION,
            "description": SERVICE_DESCRIPTION,
            "environment": settings.ENVIRONMENT,
            "endpoints": {
                "designs": "/api/designs",
                "health": "/health",
                "ready": "/health/ready",
                "live": "/health/live",
                "metrics": "/metrics",
                "docs": "/api/docs"
            }
        }

    return app


app = create_app()
