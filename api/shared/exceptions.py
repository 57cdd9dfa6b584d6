"""Shared exceptions for the content generation API."""
from typing import Any, Dict, Optional


class AppException(Exception):
    """Base exception for the API.

    ``status_code`` is the HTTP status the exception handler responds with.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(AppException):
    """Raised when input validation fails."""

    status_code = 422

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "VALIDATION_ERROR", details)


class NotFoundError(AppException):
    """Raised when a resource is not found."""

    status_code = 404

    def __init__(self, resource: str, identifier: str):
        message = f"{resource} not found"
        super().__init__(
            message, "NOT_FOUND", {"resource": resource, "identifier": identifier}
        )


class ForbiddenError(AppException):
    """Raised when the caller does not own the resource."""

    status_code = 403

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "FORBIDDEN", details)


class UnauthorizedError(AppException):
    """Raised when credentials or the bearer token are missing or invalid."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, "UNAUTHORIZED")


class RateLimitExceededError(AppException):
    """Raised when a source address used up its request allowance."""

    status_code = 429

    def __init__(self, max_attempts: int):
        message = (
            f"Too many requests. Maximum {max_attempts} attempts allowed per IP address."
        )
        super().__init__(message, "RATE_LIMITED", {"remaining": 0})


class ExternalServiceError(AppException):
    """Raised when the generation service answered with a non-success status."""

    def __init__(
        self,
        service: str,
        message: str,
        status_code: int,
        details: Optional[Dict[str, Any]] = None,
    ):
        full_message = f"{service} service error: {message}"
        super().__init__(
            full_message, "EXTERNAL_SERVICE_ERROR", details, status_code=status_code
        )


class ExternalServiceUnreachableError(AppException):
    """Raised when the generation service timed out or could not be reached."""

    status_code = 504

    def __init__(self, message: str = "Connection timeout or network error"):
        super().__init__(
            message,
            "EXTERNAL_SERVICE_UNREACHABLE",
            {"error": "Unable to reach content generation service"},
        )


class InternalError(AppException):
    """Raised for anything unexpected; detail is only exposed in debug mode."""

    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "INTERNAL_ERROR", details)
