"""
Ad Packages API - FastAPI Application

Main entry point for the backend API.
Provides endpoints for browsing, purchasing and cancelling ad packages.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import InterfaceError, OperationalError

from app.config.settings import settings
from app.infrastructure.exceptions import (
    AdPackagesError,
    ValidationError,
    NotFoundError,
    ServiceUnavailableError,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup
    mode = "sandbox" if settings.payments_sandbox else "live"
    logger.info(
        f"Ad Packages Backend starting in {settings.environment} mode "
        f"(payments: {mode})..."
    )

    try:
        from app.infrastructure.db.database import init_db
        await init_db()
        logger.info("SQLModel database connection pool initialized")
    except Exception as e:
        logger.warning(f"SQLModel database initialization skipped: {e}")

    yield

    # Shutdown
    try:
        from app.infrastructure.db.database import close_db
        await close_db()
        logger.info("SQLModel database connection pool closed")
    except Exception as e:
        logger.warning(f"SQLModel database shutdown error: {e}")

    logger.info("Ad Packages Backend shutting down...")


app = FastAPI(
    title="Ad Packages API",
    description="Package purchases and subscriptions for the ad campaign platform",
    version="1.0.0",
    lifespan=lifespan,
    debug=settings.debug,
)

# CORS configuration from Settings
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Exception Handlers
# ============================================================================

@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    """Handle validation errors."""
    return JSONResponse(
        status_code=400,
        content=exc.to_dict(),
    )


@app.exception_handler(NotFoundError)
async def not_found_error_handler(request: Request, exc: NotFoundError):
    """Handle not found errors."""
    return JSONResponse(
        status_code=404,
        content=exc.to_dict(),
    )


@app.exception_handler(ServiceUnavailableError)
async def service_unavailable_handler(request: Request, exc: ServiceUnavailableError):
    """Handle unreachable payment providers."""
    logger.error(f"Service unavailable: {exc.message}")
    return JSONResponse(
        status_code=503,
        content={"error": "Unavailable", "message": exc.message, "details": exc.details},
    )


@app.exception_handler(OperationalError)
@app.exception_handler(InterfaceError)
async def database_unavailable_handler(request: Request, exc: Exception):
    """Handle lost or refused database connections."""
    logger.error(f"Database unavailable: {exc}")
    return JSONResponse(
        status_code=503,
        content={"error": "Unavailable", "message": "Database is unavailable"},
    )


@app.exception_handler(AdPackagesError)
async def general_error_handler(request: Request, exc: AdPackagesError):
    """Handle all other application errors."""
    return JSONResponse(
        status_code=500,
        content=exc.to_dict(),
    )


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "ad-packages"}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Ad Packages API",
        "version": "1.0.0",
        "docs": "/docs",
    }


# ============================================================================
# Import and register routers
# ============================================================================

from app.api.routes import packages

app.include_router(packages.router, prefix="/api", tags=["Packages"])
