"""
Custom exception hierarchy for consistent error responses.

Usage:
    from equiptrack.exceptions import NotFoundError, ValidationError

    raise NotFoundError("Equipment", equipment_id)
    raise ConflictError("Asset ID TT-0025 already exists")
    raise ValidationError("Missing required field(s): site", fields=["site"])
    raise BackendTimeoutError("Request timed out. Please try again.")

These exceptions are caught by the handler registered in main.py and
converted to consistent JSON error responses with the shape:
    {"error": "<message>", "detail": "<optional extra info>", "fields": [...]}
"""

from fastapi import HTTPException, status


class AppError(HTTPException):
    """Base application error with a default status code."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            status_code=self.__class__.status_code,
            detail=message,
        )
        self.message = message
        self.extra_detail = detail

    def __str__(self) -> str:
        return self.message


class NotFoundError(AppError):
    """Resource not found (404)."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, resource_id: int | str | None = None):
        if resource_id is not None:
            message = f"{resource} not found (id={resource_id})"
        else:
            message = f"{resource} not found"
        super().__init__(message)


class ConflictError(AppError):
    """Resource conflict (409)."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str):
        super().__init__(message)


class ValidationError(AppError):
    """
    Validation error (400).

    Raised before any write is attempted, so it never leaves partial
    state behind. ``fields`` names the offending input fields.
    """

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, fields: list[str] | None = None):
        super().__init__(message)
        self.fields = list(fields or [])


class BackendError(AppError):
    """The backing store failed to complete a read or write (503)."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, message: str = "Backend request failed", detail: str | None = None):
        super().__init__(message, detail)


class BackendTimeoutError(BackendError):
    """A read exceeded the configured load timeout (504)."""

    status_code = status.HTTP_504_GATEWAY_TIMEOUT

    def __init__(self, message: str = "Request timed out. Please try again."):
        super().__init__(message)


class ServiceError(AppError):
    """Internal service error (500)."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
