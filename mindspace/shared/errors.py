"""
Error taxonomy and JSON error responses for the journal service.

Domain code raises the ``JournalError`` subclasses below; the API layer turns
them into the standard error envelope with ``journal_error_response``.

Usage:
    from mindspace.shared.errors import NotFoundError, journal_error_response

    raise NotFoundError("Entry not found", resource_id=entry_id)

    # In an exception handler:
    return journal_error_response(exc, correlation_id=request.state.correlation_id)

Envelope:
    {"error": {"code": "NOT_FOUND", "message": "...", "correlation_id": "ab12cd34"}}
"""

from enum import Enum
from typing import Any, Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Standard error codes used across the service."""

    # Client errors (4xx)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"

    # Server errors (5xx)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Domain-specific errors
    EMPTY_GENERATION = "EMPTY_GENERATION"


# =============================================================================
# DOMAIN EXCEPTIONS
# =============================================================================

class JournalError(Exception):
    """Base class for every error the journal core surfaces to callers."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    status_code: int = 500

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)


class AuthenticationError(JournalError):
    """No identity, or a token that is missing, malformed, expired or rejected."""

    code = ErrorCode.UNAUTHORIZED
    status_code = 401


class ValidationError(JournalError):
    """A required field is missing or outside its domain."""

    code = ErrorCode.VALIDATION_ERROR
    status_code = 400


class NotFoundError(JournalError):
    code = ErrorCode.NOT_FOUND
    status_code = 404

    def __init__(self, message: str, resource_id: Optional[str] = None) -> None:
        super().__init__(message, {"resource_id": resource_id} if resource_id else None)
        self.resource_id = resource_id


class PersistenceError(JournalError):
    """Storage read or write failed; nothing was committed to the cache."""

    code = ErrorCode.DATABASE_ERROR
    status_code = 500

    def __init__(self, message: str, operation: Optional[str] = None) -> None:
        super().__init__(message, {"operation": operation} if operation else None)
        self.operation = operation


class UpstreamServiceError(JournalError):
    """The generation service failed. Upstream bodies are never attached."""

    code = ErrorCode.EXTERNAL_SERVICE_ERROR
    status_code = 502

    def __init__(self, message: str = "Generation service failed", status: Optional[int] = None) -> None:
        super().__init__(message)
        self.upstream_status = status


class EmptyGenerationError(UpstreamServiceError):
    """The generation service answered but produced no text."""

    code = ErrorCode.EMPTY_GENERATION

    def __init__(self, message: str = "No text generated") -> None:
        super().__init__(message)


# =============================================================================
# RESPONSE HELPERS
# =============================================================================

class ErrorDetail(BaseModel):
    """Structured error detail model."""
    code: str
    message: str
    details: Optional[dict[str, Any]] = None
    correlation_id: Optional[str] = None


class ErrorResponse(BaseModel):
    """Standard error response wrapper."""
    error: ErrorDetail


def get_correlation_id(request: Optional[Request] = None) -> Optional[str]:
    """Extract correlation ID from request state, if the middleware set one."""
    if request is None:
        return None
    return getattr(request.state, "correlation_id", None)


def error_response(
    code: ErrorCode,
    message: str,
    status_code: int,
    details: Optional[dict[str, Any]] = None,
    correlation_id: Optional[str] = None,
) -> JSONResponse:
    """
    Create a standardized JSON error response.

    Args:
        code: Error code from ErrorCode enum
        message: Human-readable error message
        status_code: HTTP status code
        details: Optional additional error details
        correlation_id: Request correlation ID for tracing

    Returns:
        JSONResponse with standardized error format
    """
    error_detail = ErrorDetail(
        code=code.value,
        message=message,
        details=details,
        correlation_id=correlation_id,
    )
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error_detail).model_dump(exclude_none=True),
    )


def journal_error_response(
    exc: JournalError,
    correlation_id: Optional[str] = None,
) -> JSONResponse:
    """Render a domain exception with the status and code it carries."""
    return error_response(
        code=exc.code,
        message=exc.message,
        status_code=exc.status_code,
        details=exc.details,
        correlation_id=correlation_id,
    )


def method_not_allowed_error(correlation_id: Optional[str] = None) -> JSONResponse:
    return error_response(
        code=ErrorCode.METHOD_NOT_ALLOWED,
        message="Method not allowed",
        status_code=405,
        correlation_id=correlation_id,
    )


def configuration_error(correlation_id: Optional[str] = None) -> JSONResponse:
    """
    Create a 500 response for a missing server-side setting.

    The message stays generic; which setting is missing goes to the log only.
    """
    return error_response(
        code=ErrorCode.CONFIGURATION_ERROR,
        message="Server configuration error",
        status_code=500,
        correlation_id=correlation_id,
    )
