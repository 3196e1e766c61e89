"""Uniform response envelope used by every endpoint."""

from datetime import UTC, datetime
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def _timestamp() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def success_response(
    status_code: int = 200,
    message: str = "Success",
    data: Any = None,
    meta: dict | None = None,
) -> JSONResponse:
    """Build ``{success, message, data?, meta?, timestamp}``."""
    content: dict[str, Any] = {"success": True, "message": message}
    if data is not None:
        content["data"] = data
    if meta is not None:
        content["meta"] = meta
    content["timestamp"] = _timestamp()
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


def error_response(
    status_code: int = 500,
    message: str = "Internal server error",
    errors: list[dict] | None = None,
) -> JSONResponse:
    """Build ``{success: false, message, errors?, timestamp}``."""
    content: dict[str, Any] = {"success": False, "message": message}
    if errors:
        content["errors"] = errors
    content["timestamp"] = _timestamp()
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))

