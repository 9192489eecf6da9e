"""
Exception handlers translating the error taxonomy into HTTP responses.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shortener.core.exceptions import (
    AuthenticationFailureError,
    BadParamInputError,
    ConflictError,
    ForbiddenError,
    MissingTokenError,
    NoAffectedError,
    NotFoundError,
    OperationTimeoutError,
    ShortenerError,
)
from shortener.core.logging import get_logger

logger = get_logger(__name__)

STATUS_CODES: dict[type[ShortenerError], int] = {
    AuthenticationFailureError: status.HTTP_401_UNAUTHORIZED,
    MissingTokenError: status.HTTP_400_BAD_REQUEST,
    BadParamInputError: status.HTTP_400_BAD_REQUEST,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    NoAffectedError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    OperationTimeoutError: status.HTTP_504_GATEWAY_TIMEOUT,
}


def get_status_code(exc: ShortenerError) -> int:
    """Status of the most specific mapped class in the exception's MRO."""
    for cls in type(exc).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def shortener_error_handler(request: Request, exc: ShortenerError) -> JSONResponse:
    """
    Handle errors raised by services and repositories.

    Args:
        request: The incoming request
        exc: The raised error

    Returns:
        JSON body from ``exc.to_dict()`` with the mapped status code
    """
    status_code = get_status_code(exc)
    headers = None

    if status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}

    if status_code >= 500:
        logger.error(
            f"{request.method} {request.url.path} failed: {exc.code}: {exc.message}",
            exc_info=exc,
        )
    else:
        logger.warning(
            f"{request.method} {request.url.path} rejected: {exc.code}: {exc.message}",
            extra={"error_code": exc.code},
        )

    return JSONResponse(status_code=status_code, content=exc.to_dict(), headers=headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report request validation failures per field."""
    fields: dict[str, str] = {}
    for error in exc.errors():
        loc = [str(part) for part in error["loc"] if part not in ("body", "query", "path")]
        fields[".".join(loc) or "body"] = error["msg"]

    logger.warning(f"{request.method} {request.url.path} validation failed: {fields}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "validation error", "fields": fields},
    )


async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions; details stay in the log."""
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred",
            "details": {},
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ShortenerError, shortener_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, internal_error_handler)
