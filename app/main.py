"""Board Backend API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Middleware chain: PanicRecoveryMiddleware → CORS → routes
    - Deliberate errors mapped to JSON by global handlers; unexpected ones
      recovered and reported by PanicRecoveryMiddleware
    - Database initialized on startup via lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Reporting config read once here and frozen into the middleware
    - Shutdown drains in-flight crash reports for a bounded time
    - Docs served at /swagger and /swagger.json (paths existing clients use)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.error_handlers import register_error_handlers
from app.api.recovery_middleware import PanicRecoveryMiddleware
from app.api.routes import health, projects
from app.config import get_settings
from app.infrastructure.database import close_db, init_db
from app.infrastructure.observability import setup_logging
from app.infrastructure.report_dispatcher import ReportDispatcher

logger = logging.getLogger(__name__)

settings = get_settings()
reporting = settings.reporting_config()
report_dispatcher = ReportDispatcher.from_config(reporting)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    setup_logging(settings.log_level, settings.log_format)
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        search_path=settings.database_search_path,
    )
    if not reporting.enabled:
        logger.warning("RUNTIME_ERROR_ENDPOINT_URL is not set - error reporting disabled")
    logger.info("Board Backend API started")
    yield
    logger.info("Board Backend API shutting down")
    if report_dispatcher is not None:
        await report_dispatcher.drain(timeout=settings.report_drain_seconds)
    await close_db()


app = FastAPI(
    title="Backend API",
    version="1.0.0",
    description="Board Backend API Documentation",
    lifespan=lifespan,
    docs_url="/swagger",
    openapi_url="/swagger.json",
    redoc_url=None,
)

# Last added runs outermost: PanicRecoveryMiddleware wraps CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type"],
)
app.add_middleware(
    PanicRecoveryMiddleware,
    config=reporting,
    dispatcher=report_dispatcher,
)

register_error_handlers(app)

# Routes: explicit registration
app.include_router(health.router)
app.include_router(projects.router)
