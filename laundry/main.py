from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from laundry.config import Settings, get_settings
from laundry.api.v1.router import api_router
from laundry.core.exceptions import OrderError, OrderConflictError, OrderPersistenceError
from laundry.core.logging_config import configure_logging
from laundry.database import build_engine, build_session_factory, init_db


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
    - Create tables on SQLite (PostgreSQL schemas are managed by alembic)

    Shutdown:
    - Dispose the engine's connection pool
    """
    settings: Settings = app.state.settings
    engine = app.state.engine

    if settings.is_sqlite:
        await init_db(engine)

    logger.info(f"{settings.APP_NAME} v{settings.APP_VERSION} started")

    yield

    await engine.dispose()
    logger.info(f"{settings.APP_NAME} stopped")


async def order_error_handler(request: Request, exc: OrderError):
    """Map order engine errors to JSON responses."""
    content = {"detail": exc.message}
    if isinstance(exc, OrderConflictError):
        content["retryable"] = exc.retryable
    return JSONResponse(status_code=exc.status_code, content=content)


async def persistence_error_handler(request: Request, exc: OrderPersistenceError):
    """Hide database details unless the app runs in debug mode."""
    settings: Settings = request.app.state.settings

    if settings.DEBUG:
        content = {
            "detail": exc.message,
            "error": exc.detail,
            "type": type(exc.__cause__).__name__ if exc.__cause__ else type(exc).__name__,
            "path": str(request.url.path),
            "method": request.method,
        }
    else:
        content = {"detail": "Internal Server Error"}

    return JSONResponse(status_code=exc.status_code, content=content)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application with its own engine and session factory."""
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Order processing and billing engine for laundry shops.",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    engine = build_engine(settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(OrderPersistenceError, persistence_error_handler)
    app.add_exception_handler(OrderError, order_error_handler)

    # Include API router
    app.include_router(api_router)

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        """Health check endpoint with database validation."""
        health_status = {
            "status": "healthy",
            "app": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "checks": {
                "database": "unknown"
            }
        }

        # Check database connectivity
        try:
            async with request.app.state.session_factory() as session:
                result = await session.execute(text("SELECT 1"))
                result.scalar()
                health_status["checks"]["database"] = "connected"
        except SQLAlchemyError as e:
            logger.error(f"Health check database error: {e}")
            health_status["status"] = "unhealthy"
            health_status["checks"]["database"] = f"error: {str(e)}" if settings.DEBUG else "error"

        # Return 503 if unhealthy
        if health_status["status"] == "unhealthy":
            return JSONResponse(status_code=503, content=health_status)

        return health_status

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint."""
        return {
            "message": f"Welcome to {settings.APP_NAME}",
            "version": settings.APP_VERSION,
            "docs": "/docs",
            "redoc": "/redoc",
        }

    return app


app = create_app()
