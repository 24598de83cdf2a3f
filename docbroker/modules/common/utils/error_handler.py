"""Utility functions for mapping domain exceptions to HTTP exceptions."""

from typing import Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ....infrastructure.logging import get_logger
from ..constants import EXCEPTION_MAPPING
from ..exceptions import DomainError, InternalError

logger = get_logger(__name__)


def map_exception(error: DomainError) -> HTTPException:
    """Map a domain exception to a corresponding HTTP exception.

    Internal errors never expose their message to the caller.
    """
    if isinstance(error, InternalError):
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=error.public_message)

    for exception_class, mapper in EXCEPTION_MAPPING.items():
        if isinstance(error, exception_class):
            return mapper(str(error))

    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="An unexpected error occurred.")


def register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers for domain exceptions."""

    @app.exception_handler(DomainError)
    async def domain_exception_handler(request: Request, exc: DomainError) -> JSONResponse:
        """Convert domain exceptions to appropriate HTTP responses."""
        http_exception = map_exception(exc)
        if http_exception.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(
                f"{request.method} {request.url.path} failed: {exc}",
                exc_info=(type(exc), exc, exc.__traceback__),
            )
        return JSONResponse(
            status_code=http_exception.status_code,
            content={"detail": http_exception.detail},
            headers=http_exception.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Answer malformed request bodies and parameters with 400 and a readable message."""
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": describe_validation_error(exc)},
        )


def handle_exception(error: Exception) -> Optional[HTTPException]:
    """
    Handle an exception and return an appropriate HTTP exception if possible.

    For use in route handlers when you want to handle exceptions manually.

    Args:
        error: The exception to handle

    Returns:
        An HTTPException if the error can be mapped, None otherwise
    """
    if isinstance(error, DomainError):
        if isinstance(error, InternalError):
            logger.error(f"Internal error: {error}", exc_info=(type(error), error, error.__traceback__))
        return map_exception(error)
    elif isinstance(error, HTTPException):
        return error
    return None


def describe_validation_error(exc: RequestValidationError) -> str:
    """Condense a request validation error into a single message."""
    errors = exc.errors()
    if not errors:
        return "Invalid request."

    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg") or "invalid value"
    if first.get("type") == "json_invalid":
        return "Request body is not valid JSON."
    return f"Invalid request: {message} ({location})" if location else f"Invalid request: {message}"
