"""
Exception Handlers.

FastAPI exception handlers that convert exceptions to the standard error
envelope. All exceptions are logged; client errors at warning level,
server errors at error level with the traceback.

Usage:
    from notes_api.core.exception_handlers import register_exception_handlers

    app = FastAPI()
    register_exception_handlers(app)
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from notes_api.core.exceptions import (
    AccountInactiveError,
    AccountLockedError,
    ApplicationError,
    AuthenticationError,
    ConflictError,
    DatabaseError,
    InvalidIdentifierError,
    NotFoundError,
    RateLimitError,
    ServiceUnavailableError,
    ValidationError,
)
from notes_api.core.logging import get_logger
from notes_api.core.responses import create_error_response

logger = get_logger(__name__)

# Map exception types to HTTP status codes
EXCEPTION_STATUS_MAP: dict[type[ApplicationError], int] = {
    ValidationError: 400,
    InvalidIdentifierError: 400,
    AuthenticationError: 401,
    AccountLockedError: 401,
    AccountInactiveError: 401,
    NotFoundError: 404,
    ConflictError: 409,
    RateLimitError: 429,
    DatabaseError: 503,
    ServiceUnavailableError: 503,
}


def _detailed_errors_enabled() -> bool:
    from notes_api.core.config import get_app_config

    return get_app_config().features.api_detailed_errors


def _get_request_id(request: Request) -> str | None:
    """Extract request ID from request state or headers."""
    if hasattr(request.state, "request_id"):
        return request.state.request_id
    return request.headers.get("x-request-id")


async def application_error_handler(
    request: Request,
    exc: ApplicationError,
) -> JSONResponse:
    """
    Handle all ApplicationError subclasses.

    Converts application exceptions to error envelopes with the mapped
    HTTP status code.
    """
    status_code = EXCEPTION_STATUS_MAP.get(type(exc), 500)

    log_extra = {
        "code": exc.code,
        "message": exc.message,
        "status": status_code,
        "path": request.url.path,
        "method": request.method,
        "request_id": _get_request_id(request),
    }
    if status_code >= 500:
        logger.error("Server error", extra=log_extra)
    else:
        logger.warning("Client error", extra=log_extra)

    errors = exc.errors if isinstance(exc, ValidationError) else None
    content = create_error_response(
        exc.message,
        status_code,
        details={"code": exc.code},
        errors=errors,
        include_details=_detailed_errors_enabled(),
    )

    headers = None
    if isinstance(exc, RateLimitError) and exc.retry_after_seconds:
        headers = {"Retry-After": str(exc.retry_after_seconds)}

    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def validation_error_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """
    Handle FastAPI request validation errors (malformed JSON, wrong body shape).

    Reported as 400 with one entry per failing location in `errors`.
    """
    errors = [
        {
            "field": ".".join(str(loc) for loc in err.get("loc", []) if loc != "body"),
            "message": err.get("msg", "Validation error"),
        }
        for err in exc.errors()
    ]

    logger.warning(
        "Request validation failed",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_count": len(errors),
            "request_id": _get_request_id(request),
        },
    )

    return JSONResponse(
        status_code=400,
        content=create_error_response("Validation error", 400, errors=errors),
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """Wrap framework HTTP errors (unknown routes, wrong methods) in the envelope."""
    message = "Route not found" if exc.status_code == 404 else str(exc.detail)
    description = None
    if exc.status_code == 404:
        description = f"The requested route {request.method} {request.url.path} does not exist"

    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(message, exc.status_code, description=description),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Handle unexpected exceptions.

    The full exception is always logged. The caller sees the literal
    message only when detailed errors are enabled, otherwise a generic one.
    """
    logger.exception(
        "Unhandled exception",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
            "request_id": _get_request_id(request),
        },
    )

    detailed = _detailed_errors_enabled()
    message = (str(exc) or "Internal server error") if detailed else "Something went wrong"
    content = create_error_response(
        message,
        500,
        details={"type": type(exc).__name__},
        include_details=detailed,
    )
    return JSONResponse(status_code=500, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with the FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(ApplicationError, application_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    logger.debug("Exception handlers registered")
