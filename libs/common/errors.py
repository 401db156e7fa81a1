"""Error taxonomy and JSON error rendering.

Every error leaves the API as ``{"error": "<message>"}`` with the status code
of its category. Business code raises the subclasses below; they are plain
``HTTPException`` instances, so FastAPI's own handling still applies.

Usage:
    from libs.common.errors import NotFoundError, add_exception_handlers

    raise NotFoundError("Order not found")
"""

from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from libs.common.logging import get_logger

logger = get_logger(__name__)


class StoreError(HTTPException):
    """Base class for errors surfaced to API callers."""

    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str, headers: Optional[dict[str, str]] = None):
        super().__init__(
            status_code=self.status_code_default, detail=detail, headers=headers
        )


class UnauthorizedError(StoreError):
    """Missing or invalid credential."""

    status_code_default = status.HTTP_401_UNAUTHORIZED

    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(StoreError):
    """Valid credential, insufficient role or ownership."""

    status_code_default = status.HTTP_403_FORBIDDEN


class ValidationError(StoreError):
    """Missing or malformed request data."""

    status_code_default = status.HTTP_400_BAD_REQUEST


class NotFoundError(StoreError):
    status_code_default = status.HTTP_404_NOT_FOUND


class ConflictError(StoreError):
    """Request conflicts with current state (e.g. insufficient stock)."""

    status_code_default = status.HTTP_400_BAD_REQUEST


class InternalError(StoreError):
    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(
    status_code: int, message: Any, headers: Optional[dict[str, str]] = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"error": message}, headers=headers
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return error_response(exc.status_code, exc.detail, getattr(exc, "headers", None))


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else first.get("msg")
    else:
        message = "Invalid request"
    return error_response(status.HTTP_400_BAD_REQUEST, message)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"
    )


def add_exception_handlers(app: FastAPI) -> None:
    """Render every error as ``{"error": message}``."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
