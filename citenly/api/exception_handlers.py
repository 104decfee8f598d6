"""
Exception handlers for FastAPI application.

This module follows SRP by centralizing all exception handling logic.
Every error response shares the shape {"error": true, "message", "status_code"}.
"""

import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from citenly.core.domain.exceptions import DomainException, ValidationException

logger = logging.getLogger(__name__)


def _error_body(message: str, status_code: int, **extra) -> dict:
    return {"error": True, "message": message, "status_code": status_code, **extra}


def _field_errors(exc: RequestValidationError | ValidationError) -> list[dict[str, str]]:
    return [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle HTTPException with consistent response format."""
    http_exc = exc if isinstance(exc, HTTPException) else HTTPException(status_code=500, detail=str(exc))
    return JSONResponse(
        status_code=http_exc.status_code,
        content=_error_body(http_exc.detail, http_exc.status_code),
        headers=http_exc.headers,
    )


async def domain_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Map domain exceptions to HTTP status codes."""
    if not isinstance(exc, DomainException):
        return await global_exception_handler(request, exc)

    if isinstance(exc, ValidationException):
        status_code = status.HTTP_400_BAD_REQUEST
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    logger.warning(f"Domain error on {request.method} {request.url.path}: [{exc.code}] {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content=_error_body(exc.message, status_code, code=exc.code, details=exc.details),
    )


async def validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle request validation errors with detailed error messages."""
    unprocessable = status.HTTP_422_UNPROCESSABLE_ENTITY
    if not isinstance(exc, RequestValidationError | ValidationError):
        return JSONResponse(status_code=unprocessable, content=_error_body(str(exc), unprocessable))

    errors = _field_errors(exc)
    logger.warning(f"Validation error on {request.url.path}: {errors}")

    return JSONResponse(
        status_code=unprocessable,
        content=_error_body("Validation error", unprocessable, details=errors),
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle all unhandled exceptions.

    Logs the full exception with traceback and returns a safe error response.
    """
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}: {exc!s}",
        exc_info=True,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    logger.info("Exception handlers registered")
