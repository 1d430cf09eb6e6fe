"""
Top-level error handling.

Every failure leaving the pipeline is answered with the same body shape:

    {
        "error": {"type": "NotFoundError", "message": "...", "details": {...}},
        "correlation_id": "..."
    }

Backend exception text never reaches the caller; unexpected errors are logged
through the LogService with their stack trace and answered with a generic 500.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .exceptions import McLarenAPIError, RoutingError, ValidationError
from .observability import LogService, get_correlation_id

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred."


def error_body(
    error_type: str, message: str, details: Any = None, correlation_id: str | None = None
) -> dict[str, Any]:
    """Build the stable error response body."""
    return {
        "error": {"type": error_type, "message": message, "details": details},
        "correlation_id": correlation_id,
    }


def _correlation_id(request: Request) -> str | None:
    return get_correlation_id() or getattr(request.state, "correlation_id", None)


def _field_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    errors = []
    for error in exc.errors():
        # Drop the leading "body"/"path"/"query" location marker
        location = [str(part) for part in error.get("loc", ())[1:]]
        errors.append(
            {
                "field": ".".join(location) or str(error.get("loc", ("request",))[0]),
                "message": error.get("msg", "Invalid value."),
            }
        )
    return errors


def register_error_handlers(app: FastAPI, log: LogService) -> None:
    """
    Install the error handlers on an app.

    In development the app is created with ``debug=True`` and Starlette's
    diagnostic page replaces the generic 500 response.
    """

    @app.exception_handler(McLarenAPIError)
    async def handle_api_error(request: Request, exc: McLarenAPIError) -> JSONResponse:
        if exc.status_code >= 500:
            log.exception(
                f"{type(exc).__name__} while handling {request.method} {request.url.path}",
                exc,
                path=request.url.path,
            )
            message = UNEXPECTED_ERROR_MESSAGE
            details = None
        else:
            log.info(
                f"{type(exc).__name__}: {exc.message}",
                path=request.url.path,
                status_code=exc.status_code,
            )
            message = exc.message
            details = exc.details

        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(type(exc).__name__, message, details, _correlation_id(request)),
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        field_errors = _field_errors(exc)
        log.info(
            "Request validation failed",
            path=request.url.path,
            fields=[e["field"] for e in field_errors],
        )
        return JSONResponse(
            status_code=ValidationError.status_code,
            content=error_body(
                ValidationError.__name__,
                "Request validation failed",
                field_errors,
                _correlation_id(request),
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code in (404, 405):
            error_type = RoutingError.__name__
            message = f"No route matches {request.method} {request.url.path}"
            details: Any = {"path": request.url.path, "method": request.method}
        else:
            error_type = "HTTPError"
            message = str(exc.detail)
            details = None

        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(error_type, message, details, _correlation_id(request)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        log.exception(
            f"Unhandled {type(exc).__name__} while handling {request.method} {request.url.path}",
            exc,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content=error_body(
                "InternalServerError", UNEXPECTED_ERROR_MESSAGE, None, _correlation_id(request)
            ),
        )
