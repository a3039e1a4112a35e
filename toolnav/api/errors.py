"""
Exception handlers mapping domain errors onto the error envelope.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from toolnav.core.errors import DatabaseBusyError, DatabaseError, ValidationError

from .responses import ERROR_STATUS, error_response

logger = logging.getLogger(__name__)

_CODE_BY_STATUS = {status: code for code, status in reversed(list(ERROR_STATUS.items()))}


async def handle_validation_error(request: Request, exc: ValidationError):
    logger.warning("Validation error on %s: %s", request.url.path, exc)
    return error_response(str(exc), "VALIDATION_ERROR")


async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    # A missing required field is a malformed request, anything else a bad value
    code = "BAD_REQUEST" if errors and all(e.get("type") == "missing" for e in errors) else "VALIDATION_ERROR"
    message = "; ".join(
        f"{'.'.join(str(part) for part in e.get('loc', ()))}: {e.get('msg')}" for e in errors
    )
    logger.warning("Rejected request to %s: %s", request.url.path, message)
    return error_response(message or "Invalid request", code)


async def handle_busy_error(request: Request, exc: DatabaseBusyError):
    logger.error("Database busy on %s after %d attempts", request.url.path, exc.attempts)
    return error_response(str(exc), "DATABASE_BUSY")


async def handle_database_error(request: Request, exc: DatabaseError):
    logger.error("Database error on %s: %s", request.url.path, exc)
    return error_response(str(exc), "DATABASE_ERROR")


async def handle_http_exception(request: Request, exc: StarletteHTTPException):
    fallback = "BAD_REQUEST" if exc.status_code < 500 else "INTERNAL_ERROR"
    code = _CODE_BY_STATUS.get(exc.status_code, fallback)
    return error_response(str(exc.detail), code, status_code=exc.status_code)


async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path)
    return error_response("Internal server error", "INTERNAL_ERROR")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, handle_validation_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(DatabaseBusyError, handle_busy_error)
    app.add_exception_handler(DatabaseError, handle_database_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected_error)
