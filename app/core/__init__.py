"""Core application components."""

from app.core.config import settings
from app.core.exceptions import (
    AuthenticationError,
    ConflictError,
    DomainError,
    ForbiddenError,
    NotFoundError,
    StorageUploadError,
    ValidationFailedError,
)
from app.core.storage import Base, async_session, get_session_factory, init_models

__all__ = [
    "AuthenticationError",
    "Base",
    "ConflictError",
    "DomainError",
    "ForbiddenError",
    "NotFoundError",
    "StorageUploadError",
    "ValidationFailedError",
    "async_session",
    "get_session_factory",
    "init_models",
    "settings",
]
