"""
Service Errors

Domain exception hierarchy shared by every module, and the FastAPI
handlers that turn them into JSON responses.

Response body shape (same as HTTPException details):
    {"detail": {"error": "<ERROR_CODE>", "message": "<human readable message>"}}

Authorization errors only add the list of roles that would have been
accepted. Unexpected exceptions are logged and answered with a generic
500 INTERNAL_ERROR.
"""

import logging
from collections.abc import Iterable

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)

    def to_detail(self) -> dict:
        return {"error": self.error_code, "message": self.message}


class ValidationError(ServiceError):
    """Malformed or policy-violating input (blocked date, missing field...)."""

    def __init__(self, message: str, error_code: str = "VALIDATION_ERROR"):
        super().__init__(message=message, error_code=error_code, status_code=400)


class BlockedDateError(ValidationError):
    """Raised when a session is declared on a weekend or holiday."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(message=f"Date non disponible: {reason}", error_code="DATE_BLOCKED")


class AuthenticationRequiredError(ServiceError):
    """Raised when no valid session cookie accompanies the request."""

    def __init__(self, message: str = "Authentication required."):
        super().__init__(message=message, error_code="NOT_AUTHENTICATED", status_code=401)


class AuthorizationError(ServiceError):
    """Raised when the current user's role does not allow the action."""

    def __init__(
        self,
        required_roles: Iterable[str] = (),
        message: str = "Insufficient permissions.",
    ):
        self.required_roles = sorted({str(role) for role in required_roles})
        super().__init__(message=message, error_code="FORBIDDEN", status_code=403)

    def to_detail(self) -> dict:
        detail = super().to_detail()
        detail["required_roles"] = self.required_roles
        return detail


class InvalidTransitionError(ServiceError):
    """Raised when a workflow status change is not allowed from the current status."""

    def __init__(self, current_status: str, new_status: str):
        self.current_status = current_status
        self.new_status = new_status
        super().__init__(
            message=f"Invalid status transition: {current_status} -> {new_status}",
            error_code="INVALID_TRANSITION",
            status_code=400,
        )


class NotFoundError(ServiceError):
    """Raised when a requested record does not exist (or is not visible)."""

    def __init__(self, resource: str, resource_id: object | None = None):
        message = f"{resource} not found"
        if resource_id is not None:
            message = f"{resource} {resource_id} not found"
        super().__init__(message=message, error_code="NOT_FOUND", status_code=404)


class ConflictError(ServiceError):
    """Raised when a unique value is already taken."""

    def __init__(self, message: str):
        super().__init__(message=message, error_code="CONFLICT", status_code=409)


class StorageUnavailableError(ServiceError):
    """Raised when object storage credentials are not configured."""

    def __init__(self, message: str = "File storage is not configured."):
        super().__init__(message=message, error_code="STORAGE_UNAVAILABLE", status_code=503)


# ============================================
# FastAPI handlers
# ============================================


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    where = f"{request.method} {request.url.path}"
    if exc.status_code >= 500:
        logger.error(f"{where} failed: {exc.error_code} - {exc.message}")
    else:
        logger.warning(f"{where} rejected: {exc.error_code} - {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_detail()})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unexpected error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": {
                "error": "INTERNAL_ERROR",
                "message": "An unexpected error occurred. Please try again later.",
            }
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the service error handlers to the application."""
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)


__all__ = [
    "ServiceError",
    "ValidationError",
    "BlockedDateError",
    "AuthenticationRequiredError",
    "AuthorizationError",
    "InvalidTransitionError",
    "NotFoundError",
    "ConflictError",
    "StorageUnavailableError",
    "register_exception_handlers",
]
