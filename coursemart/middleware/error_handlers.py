"""Exception handlers and the shared error response envelope.

Every error leaves the API as::

    {"error": {"category": ..., "code": ..., "detail": ..., "suggestions": [...], "metadata": {...}}}

``register_exception_handlers`` wires the handlers below onto the application.
"""

import logging
from collections.abc import Callable
from typing import Any
from uuid import UUID, uuid4

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from coursemart.auth.exceptions import AuthenticationError, AuthorizationError, InvalidTokenError
from coursemart.exceptions import DataFetchError, ResourceNotFoundError, ValidationError


logger = logging.getLogger(__name__)

SENSITIVE_HEADERS = frozenset({"authorization", "cookie", "x-api-key"})


class ErrorCategory:
    """Error category constants."""

    AUTHENTICATION = "AUTHENTICATION_ERROR"
    AUTHORIZATION = "AUTHORIZATION_ERROR"
    VALIDATION = "VALIDATION_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    EXTERNAL_SERVICE = "EXTERNAL_SERVICE_ERROR"
    INTERNAL = "INTERNAL_ERROR"


class ErrorCode:
    """Specific error codes for better client handling."""

    AUTH_REQUIRED = "AUTH_REQUIRED"
    INVALID_TOKEN = "INVALID_TOKEN"  # noqa: S105
    ACCESS_DENIED = "ACCESS_DENIED"
    INVALID_INPUT = "INVALID_INPUT"
    NOT_FOUND = "NOT_FOUND"

    # Data service
    FETCH_FAILED = "FETCH_FAILED"
    WRITE_FAILED = "WRITE_FAILED"

    INTERNAL = "INTERNAL_ERROR"


class ExternalServiceError(HTTPException):
    """A write against the data service failed."""

    def __init__(self, service: str, detail: str) -> None:
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=f"{service} service error: {detail}")


def format_error_response(
    category: str,
    code: str,
    detail: str,
    status_code: int,
    suggestions: list[str] | None = None,
    metadata: dict[str, Any] | None = None,
) -> JSONResponse:
    """Build the error envelope; empty suggestions and metadata are left out."""
    error: dict[str, Any] = {"category": category, "code": code, "detail": detail}
    if suggestions:
        error["suggestions"] = suggestions
    if metadata:
        error["metadata"] = metadata
    return JSONResponse(status_code=status_code, content={"error": error})


def _client_context(request: Request) -> dict[str, Any]:
    return {
        "client_host": request.client.host if request.client else "unknown",
        "user_id": getattr(request.state, "user_id", None),
    }


async def handle_authentication_errors(request: Request, exc: AuthenticationError) -> JSONResponse:
    """401 for a missing or rejected access token."""
    logger.warning(
        f"Authentication failed for {request.method} {request.url.path}: {exc.detail}",
        extra={**_client_context(request), "error_type": type(exc).__name__},
    )

    if isinstance(exc, InvalidTokenError):
        return format_error_response(
            category=ErrorCategory.AUTHENTICATION,
            code=ErrorCode.INVALID_TOKEN,
            detail="The provided token is invalid",
            status_code=status.HTTP_401_UNAUTHORIZED,
            suggestions=["Sign in again to get a fresh token"],
        )
    return format_error_response(
        category=ErrorCategory.AUTHENTICATION,
        code=ErrorCode.AUTH_REQUIRED,
        detail=str(exc.detail) or "Authentication required",
        status_code=status.HTTP_401_UNAUTHORIZED,
        suggestions=["Sign in to access this resource"],
    )


async def handle_authorization_errors(request: Request, exc: AuthorizationError) -> JSONResponse:
    """403 when the caller's role does not allow the action."""
    logger.warning(f"Access denied for {request.method} {request.url.path}: {exc.detail}", extra=_client_context(request))

    return format_error_response(
        category=ErrorCategory.AUTHORIZATION,
        code=ErrorCode.ACCESS_DENIED,
        detail=exc.detail,
        status_code=status.HTTP_403_FORBIDDEN,
    )


async def handle_not_found_errors(request: Request, exc: ResourceNotFoundError) -> JSONResponse:
    logger.info(f"{exc.resource_type} {exc.resource_id} not found ({request.method} {request.url.path})")

    return format_error_response(
        category=ErrorCategory.RESOURCE_NOT_FOUND,
        code=ErrorCode.NOT_FOUND,
        detail=str(exc),
        status_code=status.HTTP_404_NOT_FOUND,
    )


async def handle_validation_errors(request: Request, exc: Exception) -> JSONResponse:
    """422 with per-field errors for request and pydantic failures, 400 for domain validation."""
    logger.info(f"Rejected input on {request.method} {request.url.path}: {exc}")

    if isinstance(exc, RequestValidationError | PydanticValidationError):
        fields = [
            {"field": " -> ".join(str(part) for part in error["loc"]), "message": error["msg"], "type": error["type"]}
            for error in exc.errors()
        ]
        return format_error_response(
            category=ErrorCategory.VALIDATION,
            code=ErrorCode.INVALID_INPUT,
            detail="Invalid input data",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            metadata={"errors": fields},
        )
    return format_error_response(
        category=ErrorCategory.VALIDATION,
        code=ErrorCode.INVALID_INPUT,
        detail=str(exc),
        status_code=status.HTTP_400_BAD_REQUEST,
    )


async def handle_data_fetch_errors(request: Request, exc: DataFetchError) -> JSONResponse:
    """503 for a detail view whose rows could not be read."""
    logger.error(f"Read failed on {request.method} {request.url.path}: {exc}")

    return format_error_response(
        category=ErrorCategory.EXTERNAL_SERVICE,
        code=ErrorCode.FETCH_FAILED,
        detail=f"Failed to load {exc.resource}",
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        suggestions=["Please try again later"],
    )


async def handle_external_service_errors(request: Request, exc: ExternalServiceError) -> JSONResponse:
    """503 for a failed write; the client resubmits."""
    logger.error(f"Write failed on {request.method} {request.url.path}: {exc.detail}")

    return format_error_response(
        category=ErrorCategory.EXTERNAL_SERVICE,
        code=ErrorCode.WRITE_FAILED,
        detail=exc.detail,
        status_code=exc.status_code,
        suggestions=["The change was not saved", "Please submit it again"],
    )


def log_error_context(request: Request, exc: Exception, error_id: UUID | None = None) -> None:
    """Log an unexpected failure with request details, minus credentials."""
    context = {
        **_client_context(request),
        "error_id": str(error_id) if error_id else None,
        "method": request.method,
        "path": request.url.path,
        "query_params": dict(request.query_params),
        "headers": {k: v for k, v in request.headers.items() if k.lower() not in SENSITIVE_HEADERS},
        "error_type": type(exc).__name__,
    }
    logger.error(f"Unhandled error: {exc}", extra=context, exc_info=exc)


async def handle_unexpected_errors(request: Request, exc: Exception) -> JSONResponse:
    """500 with an id that ties the response to the log entry."""
    error_id = uuid4()
    log_error_context(request, exc, error_id)

    return format_error_response(
        category=ErrorCategory.INTERNAL,
        code=ErrorCode.INTERNAL,
        detail="An unexpected error occurred",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        metadata={"error_id": str(error_id)},
        suggestions=["If the problem persists, contact support with the error ID"],
    )


# Lookup walks the exception's MRO, so subclasses (MissingTokenError, InvalidTokenError) share a handler
EXCEPTION_HANDLERS: dict[type[Exception], Callable[..., Any]] = {
    RateLimitExceeded: _rate_limit_exceeded_handler,
    AuthenticationError: handle_authentication_errors,
    AuthorizationError: handle_authorization_errors,
    ResourceNotFoundError: handle_not_found_errors,
    RequestValidationError: handle_validation_errors,
    PydanticValidationError: handle_validation_errors,
    ValidationError: handle_validation_errors,
    DataFetchError: handle_data_fetch_errors,
    ExternalServiceError: handle_external_service_errors,
    Exception: handle_unexpected_errors,
}


def register_exception_handlers(app: FastAPI) -> None:
    for exc_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exc_class, handler)
