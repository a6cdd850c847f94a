"""
FastAPI Application Entry Point.

This is the main application file for the Hostel Ledger Backend.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from hostel_backend.app.core.config import settings
from hostel_backend.app.api.v1.router import router as api_v1_router
from hostel_backend.app.core.observability import ObservabilityMiddleware, configure_logging
from hostel_backend.app.db.session import engine, Base
from hostel_backend.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)
from fastapi import HTTPException

# Import models to ensure they are registered with Base
from hostel_backend.app.models.audit_log import AuditLog
from hostel_backend.app.models.student import Student
from hostel_backend.app.models.staff import Staff
from hostel_backend.app.models.resident_financial import ResidentFinancial
from hostel_backend.app.models.income import Income
from hostel_backend.app.models.checkout_rule import CheckoutRule  # before checkout_financial for FK
from hostel_backend.app.models.checkout_financial import CheckoutFinancial

configure_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.

    1. Creates database tables on startup.
    2. Disposes the engine on shutdown.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()

# Initialize FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    description="Resident balances, payments and checkout settlement for hostels and PGs",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)

# Register global exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        dict: Status and application information
    """
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.api_version,
    }


# Include API v1 router
app.include_router(api_v1_router, prefix=f"/{settings.api_version}")


@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint.

    Returns:
        dict: Welcome message and API documentation links
    """
    return {
        "message": "Welcome to Hostel Ledger Backend API",
        "docs": "/docs",
        "health": "/health",
    }
