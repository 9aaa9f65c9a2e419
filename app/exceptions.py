# =============================================================================
# app/exceptions.py - Error Taxonomy and Exception Handlers
# =============================================================================
# Every failure below the HTTP boundary is raised as exactly one ApiError kind.
# The handlers at the bottom of this module render those kinds (plus FastAPI
# request validation errors and anything unexpected) into the error envelope.
# =============================================================================

import logging
import traceback
from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.responses import error_response

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """
    Base exception for the API.

    Carries everything the error envelope needs:
    - status_code: HTTP status
    - code: Machine-readable error code
    - message: Human-readable message
    - details: Optional structured context
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        details: Any = None,
        headers: dict[str, str] | None = None,
    ):
        self.message = message or self.default_message
        super().__init__(self.message)
        self.details = details
        self.headers = headers

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


# =============================================================================
# Client Errors (4xx)
# =============================================================================

class BadRequestError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "BAD_REQUEST"
    default_message = "Bad Request"


class ValidationFailedError(ApiError):
    """Raised with details = [{"path": ..., "message": ...}, ...]."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"
    default_message = "Validation failed"


class UnauthorizedError(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"
    default_message = "Unauthorized"

    def __init__(self, message: str | None = None, details: Any = None):
        super().__init__(message, details, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"
    default_message = "Forbidden"


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    default_message = "Resource not found"


class ConflictError(ApiError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"
    default_message = "Resource conflict"


# =============================================================================
# Server Errors (5xx)
# =============================================================================

class InternalError(ApiError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "INTERNAL_ERROR"
    default_message = "Internal server error"


class NotImplementedApiError(ApiError):
    status_code = status.HTTP_501_NOT_IMPLEMENTED
    code = "NOT_IMPLEMENTED"
    default_message = "Not implemented"


class ServiceUnavailableError(ApiError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "SERVICE_UNAVAILABLE"
    default_message = "Service unavailable"


# =============================================================================
# Exception Handlers
# =============================================================================

def _is_development(request: Request) -> bool:
    app_settings = getattr(request.app.state, "settings", None)
    if app_settings is None:
        from app.config import settings as app_settings
    return app_settings.is_development


def format_validation_errors(
    errors: list[dict[str, Any]],
    prefix: str | None = None,
) -> list[dict[str, str]]:
    """
    Flatten pydantic error dicts into ordered {path, message} pairs.

    FastAPI already prefixes `loc` with body/query/path; `prefix` is for
    errors coming from a bare model validation.
    """
    details = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ())]
        if prefix:
            loc.insert(0, prefix)
        details.append({"path": ".".join(loc), "message": err.get("msg", "Invalid value")})
    return details


async def api_exception_handler(request: Request, exc: ApiError) -> JSONResponse:
    """
    Convert ApiError to the error envelope.

    Store error diagnostics attached to 5xx errors are only exposed in
    development.
    """
    details = exc.details
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc} details={exc.details}")
        if not _is_development(request):
            details = None

    return error_response(
        exc.status_code,
        exc.code,
        exc.message,
        details,
        headers=exc.headers,
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Render FastAPI request validation failures, one detail per failing field."""
    return error_response(
        ValidationFailedError.status_code,
        ValidationFailedError.code,
        ValidationFailedError.default_message,
        format_validation_errors(exc.errors()),
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """Unmatched routes and framework-level HTTP errors."""
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return error_response(
            exc.status_code,
            NotFoundError.code,
            f"Cannot {request.method} {request.url.path}",
        )
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        return error_response(
            exc.status_code,
            "METHOD_NOT_ALLOWED",
            f"Cannot {request.method} {request.url.path}",
        )
    return error_response(exc.status_code, "HTTP_ERROR", str(exc.detail))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Anything unclassified becomes INTERNAL_ERROR.

    Development exposes the message and stack; every other environment gets a
    generic message.
    """
    logger.exception(f"Unexpected error on {request.method} {request.url.path}: {exc}")

    if _is_development(request):
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return error_response(
            InternalError.status_code,
            InternalError.code,
            str(exc) or InternalError.default_message,
            {"stack": stack},
        )

    return error_response(
        InternalError.status_code,
        InternalError.code,
        "An unexpected error occurred",
    )
