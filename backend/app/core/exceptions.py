"""
Custom exceptions and error handlers for consistent error responses.

Provides standardized error codes and global exception handlers.
"""

import logging
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        error_code: str,
        status_code: int = 500,
        details: Dict[str, Any] = None,
        error: Optional[str] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        self.error = error
        super().__init__(message)


class BadRequestError(AppException):
    """Raised when a request is well-formed JSON but not acceptable."""

    def __init__(self, message: str = "Bad request", details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code="ERR_BAD_REQUEST",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details
        )


class InvalidIdentifierError(BadRequestError):
    """Raised when an identifier does not match the store's id format."""

    def __init__(self, resource: str, value: Any):
        super().__init__(
            message=f"Invalid {resource} ID format.",
            details={"resource": resource, "id": value}
        )
        self.error_code = "ERR_INVALID_ID"


class AlreadyPaidError(BadRequestError):
    """Raised when a payment is recorded twice for the same parcel."""

    def __init__(self, parcel_id: str):
        super().__init__(
            message="Parcel is already marked as paid.",
            details={"parcel_id": parcel_id}
        )
        self.error_code = "ERR_ALREADY_PAID"


class InvalidTransitionError(BadRequestError):
    """Raised when a delivery status change is not a legal edge."""

    def __init__(self, current: str, requested: str):
        super().__init__(
            message=f"Cannot move parcel from '{current}' to '{requested}'",
            details={"current": current, "requested": requested}
        )
        self.error_code = "ERR_INVALID_TRANSITION"


class InsufficientPermissionsError(AppException):
    """Raised when user doesn't have permission to perform an action."""

    def __init__(self, message: str = "forbidden access", details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code="ERR_PERM_001",
            status_code=status.HTTP_403_FORBIDDEN,
            details=details
        )


class ResourceNotFoundError(AppException):
    """Raised when requested resource is not found."""

    def __init__(self, resource: str, resource_id: Any = None, message: Optional[str] = None):
        if message is None:
            message = f"{resource} not found"
            if resource_id:
                message = f"{resource} with ID {resource_id} not found"
        super().__init__(
            message=message,
            error_code="ERR_NOT_FOUND_001",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": resource_id}
        )


class AuthenticationError(AppException):
    """Raised for missing or malformed credentials."""

    def __init__(self, message: str = "unauthorized access"):
        super().__init__(
            message=message,
            error_code="ERR_AUTH_001",
            status_code=status.HTTP_401_UNAUTHORIZED
        )


class ServiceUnavailableError(AppException):
    """Raised when the database has not been initialized yet."""

    def __init__(self, message: str = "Database not connected or not initialized yet."):
        super().__init__(
            message=message,
            error_code="ERR_UNAVAILABLE",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE
        )


class PaymentProcessorError(AppException):
    """Raised when the payment processor rejects or fails a call."""

    def __init__(self, error: str):
        super().__init__(
            message="Failed to create payment intent.",
            error_code="ERR_PAYMENT_PROCESSOR",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error=error
        )


def _error_body(message: str, error_code: str, details: Dict[str, Any], error: Optional[str] = None) -> Dict[str, Any]:
    body = {
        "error_code": error_code,
        "message": message,
        "details": details,
    }
    if error is not None:
        body["error"] = error
    return body


# Global Exception Handlers

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handler for custom application exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.message, exc.error_code, exc.details, exc.error)
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for FastAPI HTTPException with standardized format."""
    # Map status code to error code
    error_code_map = {
        400: "ERR_BAD_REQUEST",
        401: "ERR_UNAUTHORIZED",
        403: "ERR_FORBIDDEN",
        404: "ERR_NOT_FOUND",
        503: "ERR_UNAVAILABLE",
        500: "ERR_INTERNAL_SERVER"
    }

    error_code = error_code_map.get(exc.status_code, "ERR_UNKNOWN")

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.detail, error_code, {}),
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for Pydantic validation errors."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_error_body("Validation error", "ERR_VALIDATION", {"errors": jsonable_errors(exc)})
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("An internal server error occurred", "ERR_INTERNAL_SERVER", {}, str(exc))
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may carry the raw exception object, which is not serializable
    errors = []
    for err in exc.errors():
        err = dict(err)
        if "ctx" in err:
            err["ctx"] = {key: str(value) for key, value in err["ctx"].items()}
        errors.append(err)
    return errors
