"""
Response envelope shared by every route.

Success: ``{"success": true, "data"?, "message"?, "timestamp"}``
Error:   ``{"success": false, "error", "code", "timestamp"}``
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi.responses import JSONResponse

# Error code -> HTTP status
ERROR_STATUS = {
    "BAD_REQUEST": 400,
    "NOT_FOUND": 404,
    "CONFLICT": 409,
    "VALIDATION_ERROR": 422,
    "INTERNAL_ERROR": 500,
    "DATABASE_ERROR": 500,
    "DATABASE_BUSY": 503,
}


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def success(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    """Build a success envelope; ``data`` and ``message`` are omitted when None."""
    body: Dict[str, Any] = {"success": True, "timestamp": _timestamp()}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    return body


def error_response(message: str, code: str = "INTERNAL_ERROR", status_code: Optional[int] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code or ERROR_STATUS.get(code, 500),
        content={
            "success": False,
            "error": message,
            "code": code,
            "timestamp": _timestamp(),
        },
    )
