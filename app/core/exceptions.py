"""Custom exceptions for the application."""

from fastapi import status


class DomainError(Exception):
    """Base exception for errors surfaced to API callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, errors: list[dict] | None = None):
        self.message = message
        self.errors = errors
        super().__init__(self.message)


class NotFoundError(DomainError):
    """Raised when a job, application or profile is missing or not accessible."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message)


class ForbiddenError(DomainError):
    """Raised when the caller has the wrong role or does not own the resource."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Access forbidden"):
        super().__init__(message)


class ConflictError(DomainError):
    """Raised when an operation clashes with the current application state."""

    status_code = status.HTTP_409_CONFLICT


class ValidationFailedError(DomainError):
    """Raised for malformed input, with a field-level breakdown."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(
            "Validation failed", errors=[{"field": field, "message": message}]
        )


class AuthenticationError(DomainError):
    """Raised when authentication fails."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, detail: str = "Authentication failed"):
        self.detail = detail
        super().__init__(detail)


class StorageUploadError(DomainError):
    """Raised when the object store rejects or fails an upload."""

    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, detail: str, status_code: int | None = None):
        self.upstream_status = status_code
        super().__init__(f"File upload failed: {detail}")
