"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from piefolio.api.deps import reset_state
from piefolio.api.middleware import RequestLoggingMiddleware
from piefolio.api.routers import allocations_router, portfolio_router, settings_router
from piefolio.config.logging_config import setup_logging
from piefolio.config.settings import get_settings
from piefolio.core.exceptions import AppError, CacheError, UpstreamError
from piefolio.repositories.sqlalchemy.database import init_db

logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = "Portfolio data is temporarily unavailable"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    setup_logging()
    init_db()
    yield
    reset_state()


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Pie-based portfolio snapshots and target allocation analysis",
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(portfolio_router)
app.include_router(allocations_router)
app.include_router(settings_router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Global handler for application errors."""
    message = exc.message
    if isinstance(exc, (UpstreamError, CacheError)):
        # Details stay in the log; callers only learn that data is unavailable
        logger.error("Portfolio data unavailable code=%s detail=%s", exc.code, exc.message)
        message = UNAVAILABLE_MESSAGE
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "message": message},
    )


@app.get("/health")
def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}
