"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from portfolio_ledger.config.settings import get_settings
from portfolio_ledger.config.logging_config import setup_logging
from portfolio_ledger.repositories.sqlalchemy.database import init_db
from portfolio_ledger.api.routers import (
    portfolios_router,
    positions_router,
    trades_router,
    analysis_router,
)
from portfolio_ledger.core.exceptions import AppError, PersistenceError

API_PREFIX = "/api/v1"

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    setup_logging()
    init_db()
    yield
    # Shutdown (nothing to clean up)


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Portfolio ledger and trade execution service",
    version=settings.app_version,
    lifespan=lifespan,
)

# Include routers
app.include_router(portfolios_router, prefix=API_PREFIX)
app.include_router(positions_router, prefix=API_PREFIX)
app.include_router(trades_router, prefix=API_PREFIX)
app.include_router(analysis_router, prefix=API_PREFIX)


def status_for(exc: AppError) -> int:
    """HTTP status for an application error."""
    if exc.code == "NOT_FOUND":
        return 404
    if isinstance(exc, PersistenceError):
        return 503
    if exc.code == "PRICE_UNAVAILABLE":
        return 502
    return 400


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Global handler for application errors."""
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.code, "message": exc.message},
    )


@app.get("/health")
def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
def root() -> dict[str, str]:
    """Root endpoint with API info."""
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "api": API_PREFIX,
    }
