"""Translation from core error types to HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from otp_auth.exceptions import ClockError, MailError, OtpError, StorageError, ValidationError

logger = logging.getLogger(__name__)

# Most specific first; the first matching entry wins
ERROR_STATUS: list[tuple[type[OtpError], int]] = [
    (ValidationError, 422),
    (StorageError, 503),
    (MailError, 502),
    (ClockError, 500),
]


def status_for(exc: OtpError) -> int:
    """Return the HTTP status code for *exc*."""
    for kind, status_code in ERROR_STATUS:
        if isinstance(exc, kind):
            return status_code
    return 500


async def otp_error_handler(request: Request, exc: OtpError) -> JSONResponse:
    """Render an ``OtpError`` as ``{"error": ...}`` with its mapped status."""
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"error": exc.public_message})


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(OtpError, otp_error_handler)
