"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from portfolio_client.api.deps import get_context
from portfolio_client.api.routers import (
    accounts_router,
    auth_router,
    cache_router,
    portfolio_router,
)
from portfolio_client.config.logging_config import setup_logging
from portfolio_client.config.settings import get_settings
from portfolio_client.core.exceptions import AppError, StorageError


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    setup_logging()
    context = get_context()
    yield
    # Shutdown
    context.close()


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Local portfolio client backed by a cached replica of the remote service",
    version=settings.app_version,
    lifespan=lifespan,
)

# Include routers
app.include_router(portfolio_router)
app.include_router(accounts_router)
app.include_router(auth_router)
app.include_router(cache_router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Global handler for application errors."""
    # Local persistence failures are server-side
    status_code = 503 if isinstance(exc, StorageError) else 400
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
    }
