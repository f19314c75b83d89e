"""Error handling middleware.

Every error body has the same shape::

    {"error": <class name>, "code": <stable code>, "message": ...,
     "retryable": <bool>, "path": ...}

``code`` is what clients should branch on; ``error`` is kept for humans
reading logs and responses.
"""

from typing import Any

import structlog
from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.exceptions import AppException

logger = structlog.get_logger()


def _error_response(
    request: Request,
    status_code: int,
    error: str,
    code: str,
    message: Any,
    retryable: bool = False,
    **extra: Any,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "code": code,
            "message": message,
            "retryable": retryable,
            **extra,
            "path": str(request.url),
        },
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Render domain exceptions with their status code and error code.

    Args:
        request: Request object
        exc: Application exception

    Returns:
        JSON error response
    """
    log = logger.warning if exc.status_code >= 500 else logger.info
    log(
        "app_exception",
        error=exc.__class__.__name__,
        code=exc.code,
        message=exc.message,
        status_code=exc.status_code,
        path=request.url.path,
    )
    return _error_response(
        request,
        exc.status_code,
        error=exc.__class__.__name__,
        code=exc.code,
        message=exc.message,
        retryable=exc.retryable,
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """Render framework HTTP errors (unknown route, wrong method)."""
    return _error_response(
        request,
        exc.status_code,
        error="HTTPException",
        code="http_error",
        message=exc.detail,
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """
    Handle request body and parameter validation errors.

    Args:
        request: Request object
        exc: Validation exception

    Returns:
        JSON error response with validation details
    """
    return _error_response(
        request,
        422,
        error="ValidationError",
        code="request_validation",
        message="Request validation failed",
        details=jsonable_encoder(exc.errors()),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected exceptions and hide their details from the client."""
    logger.exception("unhandled_exception", path=request.url.path, error=str(exc))
    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        error="InternalServerError",
        code="internal_error",
        message="An unexpected error occurred",
    )
