"""Translate booking errors into HTTP responses."""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from services.errors import (
    BookingError,
    ConfigurationError,
    ConflictError,
    NotFoundError,
    PartialFailure,
    PersistenceError,
)


logger = logging.getLogger(__name__)


def status_for_error(error: BookingError) -> int:
    """HTTP status code for a booking error."""
    if isinstance(error, (ConflictError, PartialFailure)):
        return 409
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, PersistenceError):
        return 503
    if isinstance(error, ConfigurationError):
        return 500
    return 500


def error_response(error: BookingError) -> JSONResponse:
    """JSON body {success: false, error: <code>, message: ...}."""
    return JSONResponse(
        status_code=status_for_error(error),
        content={"success": False, **error.to_dict()},
    )


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    """Exception handler registered for BookingError."""
    if isinstance(exc, PersistenceError):
        logger.error(f"Store failure on {request.method} {request.url.path}: {exc.message}")
    return error_response(exc)
