"""Global exception handlers for consistent error responses.

Design:
- ValidationAppError / RequestValidationError -> 400
- RateLimitAppError -> 429 with Retry-After
- Any other AppError or unexpected Exception -> 500 without internals

Error bodies are flat: ``{"error": <message>, "details": <description>, ...}``
plus ``currentLength``/``minLength``/``maxLength``/``retryAfter`` when
relevant, a machine-readable ``code`` and the ``request_id``.
"""

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from insight_engine.core.config import settings_for
from insight_engine.core.errors import AppError, RateLimitAppError, ValidationAppError
from insight_engine.core.logging import get_request_id

logger = logging.getLogger(__name__)

# ErrorDetails keys rendered at the top level of the body, in camelCase
_DETAIL_FIELDS = {
    "current_length": "currentLength",
    "min_length": "minLength",
    "max_length": "maxLength",
    "retry_after": "retryAfter",
    "supported_types": "supportedTypes",
}


def _status_for(exc: AppError) -> int:
    if isinstance(exc, ValidationAppError):
        return 400
    if isinstance(exc, RateLimitAppError):
        return 429
    return 500


def build_error_body(exc: AppError) -> dict[str, Any]:
    """Render an AppError as the public JSON error body."""

    body: dict[str, Any] = {"error": exc.message, "code": exc.code}
    details = exc.details or {}
    if details.get("description"):
        body["details"] = details["description"]
    for key, wire_key in _DETAIL_FIELDS.items():
        if key in details:
            body[wire_key] = details[key]
    body["request_id"] = get_request_id()
    return body


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors with the flat JSON error format.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with 400, 429 or 500 and the error body.
    """
    status_code = _status_for(exc)

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "request_path": request.url.path,
        },
    )

    headers: dict[str, str] | None = None
    if isinstance(exc, RateLimitAppError) and settings_for(request.app).app.rate_limit_include_headers:
        retry_after = (exc.details or {}).get("retry_after")
        if retry_after is not None:
            headers = {"Retry-After": str(retry_after)}

    return JSONResponse(status_code=status_code, content=build_error_body(exc), headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Turn FastAPI's 422 (malformed JSON, wrong field types) into a 400."""

    logger.warning(
        "request_validation_failed",
        extra={"request_path": request.url.path, "error_count": len(exc.errors())},
    )
    return JSONResponse(
        status_code=400,
        content={
            "error": "Invalid request body",
            "code": "invalid_request",
            "details": "Send a JSON object such as {\"text\": \"...\", \"analysisType\": \"sentiment\"}.",
            "request_id": get_request_id(),
        },
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Logs the failure with its type and returns a generic message; no stack
    traces or vendor messages reach the client.
    """
    logger.error(
        "unhandled_exception",
        exc_info=exc,
        extra={
            "error_type": type(exc).__name__,
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "details": "An unexpected error occurred. Please try again later.",
            "request_id": get_request_id(),
        },
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with the FastAPI app.

    Args:
        app: FastAPI application instance.
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(RequestValidationError)(request_validation_handler)
    app.exception_handler(Exception)(general_exception_handler)
