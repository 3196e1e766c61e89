"""Validation logic for application submissions."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import PurePath

logger = logging.getLogger(__name__)

ALLOWED_DOCUMENT_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
}
ALLOWED_DOCUMENT_EXTENSIONS = {".pdf", ".doc", ".docx", ".txt"}

COVER_LETTER_MAX_LENGTH = 5000


@dataclass
class ValidationResult:
    """Result of validation process."""

    is_valid: bool
    error: str | None = None
    warnings: list[str] = field(default_factory=list)


def validate_document_upload(
    filename: str | None,
    content_type: str | None,
    size: int,
    max_bytes: int,
) -> ValidationResult:
    """Validate an uploaded resume or cover letter file."""
    if not filename:
        return ValidationResult(is_valid=False, error="File name is required")

    if size == 0:
        return ValidationResult(is_valid=False, error="File is empty")

    if size > max_bytes:
        return ValidationResult(
            is_valid=False,
            error=f"File exceeds the {max_bytes // (1024 * 1024)} MB limit",
        )

    extension = PurePath(filename).suffix.lower()
    if (
        content_type not in ALLOWED_DOCUMENT_TYPES
        and extension not in ALLOWED_DOCUMENT_EXTENSIONS
    ):
        return ValidationResult(
            is_valid=False,
            error="Only documents (pdf, doc, docx, txt) are allowed",
        )

    warnings = []
    if content_type not in ALLOWED_DOCUMENT_TYPES:
        warnings.append(f"Unrecognised content type {content_type!r}, accepted by extension")

    return ValidationResult(is_valid=True, warnings=warnings)


def validate_cover_letter(text: str | None) -> ValidationResult:
    """Validate free-text cover letter length."""
    if text and len(text.strip()) > COVER_LETTER_MAX_LENGTH:
        return ValidationResult(
            is_valid=False,
            error=f"Cover letter cannot exceed {COVER_LETTER_MAX_LENGTH} characters",
        )
    return ValidationResult(is_valid=True)


def parse_answers(raw: str | list | None) -> list[dict]:
    """Normalize screening answers from a JSON string or list.

    Malformed input is treated as "no answers".
    """
    if raw is None or raw == "":
        return []

    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            logger.debug("Ignoring malformed answers payload")
            return []

    if not isinstance(raw, list):
        return []

    answers = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        answers.append(
            {
                "question_id": _optional_str(item.get("question_id", item.get("questionId"))),
                "question": _optional_str(item.get("question")),
                "answer": _optional_str(item.get("answer")),
            }
        )
    return answers


def _optional_str(value) -> str | None:
    if value is None:
        return None
    return str(value)
