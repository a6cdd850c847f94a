"""
Custom exceptions and error handlers for consistent error responses.

Provides standardized error codes and global exception handlers.
"""

import logging
from datetime import date
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from typing import Any, Dict

logger = logging.getLogger("hostel")


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, error_code: str, status_code: int = 500, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class ResourceNotFoundError(AppException):
    """Raised when requested resource is not found."""

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(
            message=message,
            error_code="ERR_NOT_FOUND_001",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": resource_id}
        )


class FinanceValidationError(AppException):
    """Raised when a fee calculation receives malformed input."""

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code="ERR_FIN_VALIDATION",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=details
        )


class InvalidRangeError(FinanceValidationError):
    """Raised when a billing period ends before it starts."""

    def __init__(self, period_start: date, period_end: date):
        super().__init__(
            message=f"Period end {period_end.isoformat()} is before period start {period_start.isoformat()}",
            details={
                "period_start": period_start.isoformat(),
                "period_end": period_end.isoformat()
            }
        )


class InvalidDurationError(FinanceValidationError):
    """Raised when a checkout duration is negative."""

    def __init__(self, checkout_duration_days: int):
        super().__init__(
            message=f"Checkout duration must not be negative (got {checkout_duration_days})",
            details={"checkout_duration_days": checkout_duration_days}
        )


class LedgerDisabledError(AppException):
    """Raised when writing to a ledger source this deployment does not carry."""

    def __init__(self, ledger: str):
        super().__init__(
            message=f"The {ledger} ledger is not enabled in this deployment",
            error_code="ERR_LEDGER_DISABLED",
            status_code=status.HTTP_409_CONFLICT,
            details={"ledger": ledger}
        )


class DuplicateCheckoutError(AppException):
    """Raised when a checkout has already been settled."""

    def __init__(self, checkout_id: int):
        super().__init__(
            message="Financial record already exists for this checkout",
            error_code="ERR_CHECKOUT_SETTLED",
            status_code=status.HTTP_409_CONFLICT,
            details={"checkout_id": checkout_id}
        )


class RuleConflictError(AppException):
    """Raised when a checkout rule change would break rule consistency."""

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code="ERR_RULE_CONFLICT",
            status_code=status.HTTP_409_CONFLICT,
            details=details
        )


# Global Exception Handlers

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handler for custom application exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": exc.error_code,
            "message": exc.message,
            "details": exc.details
        }
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for FastAPI HTTPException with standardized format."""
    # Map status code to error code
    error_code_map = {
        400: "ERR_BAD_REQUEST",
        401: "ERR_UNAUTHORIZED",
        403: "ERR_FORBIDDEN",
        404: "ERR_NOT_FOUND",
        409: "ERR_CONFLICT",
        500: "ERR_INTERNAL_SERVER"
    }

    error_code = error_code_map.get(exc.status_code, "ERR_UNKNOWN")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": exc.detail,
            "details": {}
        },
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for Pydantic validation errors."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error_code": "ERR_VALIDATION",
            "message": "Validation error",
            "details": {
                "errors": jsonable_encoder(exc.errors())
            }
        }
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.exception(
        "Unhandled exception",
        extra={"path": request.url.path, "exception": type(exc).__name__}
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error_code": "ERR_INTERNAL_SERVER",
            "message": "An internal server error occurred",
            "details": {}
        }
    )
