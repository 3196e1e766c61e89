"""Utility functions and classes."""

from app.utils.filters import ApplicationFilter, Page
from app.utils.responses import error_response, success_response
from app.utils.validators import (
    ValidationResult,
    parse_answers,
    validate_cover_letter,
    validate_document_upload,
)

__all__ = [
    "ApplicationFilter",
    "Page",
    "ValidationResult",
    "error_response",
    "parse_answers",
    "success_response",
    "validate_cover_letter",
    "validate_document_upload",
]
