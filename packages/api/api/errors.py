"""Flat JSON error responses and the app-wide exception handlers."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.config import is_development
from api.schemas import ErrorResponse
from gateway.errors import VendorError

logger = logging.getLogger(__name__)

INVALID_BODY_MESSAGE = "Invalid request body"
METHOD_NOT_ALLOWED_MESSAGE = "Method not allowed"
INTERNAL_ERROR_MESSAGE = "Internal server error"


def error_response(
    status_code: int,
    message: str,
    code: str | None = None,
    details: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build a ``{"error": ...}`` response, omitting empty fields."""
    body = ErrorResponse(error=message, code=code, details=details)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


def vendor_error_response(error: VendorError) -> JSONResponse:
    """Pass a vendor failure through with its status, message and code."""
    return error_response(error.status_code, error.message, code=error.code)


def internal_error_response(error: Exception) -> JSONResponse:
    """Generic 500; the exception text is only exposed in development."""
    logger.exception("Server error: %s", error)
    details = (str(error) or type(error).__name__) if is_development() else None
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        INTERNAL_ERROR_MESSAGE,
        details=details,
    )


async def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        message = METHOD_NOT_ALLOWED_MESSAGE
    else:
        message = str(exc.detail)
    return error_response(
        exc.status_code, message, headers=getattr(exc, "headers", None)
    )


async def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.info("Rejected request to %s: %s", request.url.path, exc.errors())
    return error_response(status.HTTP_400_BAD_REQUEST, INVALID_BODY_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    """Render every framework error in the flat error shape."""
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
