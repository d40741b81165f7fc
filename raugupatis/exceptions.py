"""
Application exceptions and their HTTP rendering.

Every error raised by the auth, repository and handler layers derives from
RaugupatisError, which carries its own status code and machine-readable code.
"""
import logging
from typing import Any, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class RaugupatisError(Exception):
    """Base exception for the application."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        fields: Optional[dict[str, str]] = None,
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.fields = fields or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result: dict[str, Any] = {
            "error": self.message,
            "code": self.code,
        }
        if self.fields:
            result["fields"] = self.fields
        return result


# =============================================================================
# Input
# =============================================================================

class ValidationError(RaugupatisError):
    """Malformed or out-of-range input."""

    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, message: str = "Validation failed", fields: Optional[dict[str, str]] = None):
        super().__init__(message, fields=fields)

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, fields={field: message})


class Conflict(RaugupatisError):
    status_code = 409
    code = "CONFLICT"


class DuplicateEmail(Conflict):
    """Raised when registering an email that already has an account."""

    code = "DUPLICATE_EMAIL"

    def __init__(self, email: str):
        super().__init__(
            "An account with this email already exists",
            fields={"email": "Email is already registered"},
        )
        self.email = email


class PayloadTooLarge(RaugupatisError):
    status_code = 413
    code = "PAYLOAD_TOO_LARGE"


# =============================================================================
# Auth
# =============================================================================

class InvalidCredentials(RaugupatisError):
    """Unknown email, wrong password, or locked account."""

    status_code = 401
    code = "INVALID_CREDENTIALS"

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)


class Unauthorized(RaugupatisError):
    status_code = 401
    code = "UNAUTHORIZED"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class SessionNotFound(Unauthorized):
    code = "SESSION_NOT_FOUND"

    def __init__(self, message: str = "Session not found"):
        super().__init__(message)


class SessionExpired(Unauthorized):
    code = "SESSION_EXPIRED"

    def __init__(self, message: str = "Session expired"):
        super().__init__(message)


class Forbidden(RaugupatisError):
    status_code = 403
    code = "FORBIDDEN"

    def __init__(self, message: str = "Admin access required"):
        super().__init__(message)


# =============================================================================
# Storage
# =============================================================================

class NotFound(RaugupatisError):
    """Missing row, or a row owned by another user."""

    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found")
        self.resource = resource


class StorageError(RaugupatisError):
    status_code = 500
    code = "STORAGE_ERROR"

    def __init__(self, message: str = "A storage error occurred"):
        super().__init__(message)


class MigrationError(RaugupatisError):
    """A schema migration could not be applied. Fatal at startup."""

    code = "MIGRATION_ERROR"


# =============================================================================
# Exception Handlers
# =============================================================================

async def raugupatis_exception_handler(request: Request, exc: RaugupatisError) -> JSONResponse:
    """Convert RaugupatisError to a JSON response."""
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report pydantic validation failures as 400 with one message per field."""
    fields: dict[str, str] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path", "form")]
        name = ".".join(loc) or "body"
        fields.setdefault(name, error.get("msg", "Invalid value"))
    return JSONResponse(
        status_code=400,
        content=ValidationError("Validation failed", fields=fields).to_dict(),
    )


async def storage_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Database failures are logged in full and reported without internal detail."""
    logger.exception(f"Database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content=StorageError().to_dict())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "code": "INTERNAL_ERROR"},
    )
