"""
Logging for the McLaren API.

Every record logged through ``get_logger`` or the LogService carries the
request's correlation id and request context (method, path) as ``extra``
attributes. Both live in ContextVars set by RequestScopeMiddleware.
"""

import contextvars
import logging
import uuid
from datetime import datetime
from typing import Any

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
SERVICE_LOGGER_NAME = "mclaren_api"

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)
_request_context: contextvars.ContextVar[dict[str, Any] | None] = contextvars.ContextVar(
    "request_context", default=None
)

_configured = False


def configure_logging(level: str = "INFO") -> None:
    """
    Set the root log level, installing the default handler on first call.
    """
    global _configured
    if not _configured:
        logging.basicConfig(format=LOG_FORMAT)
        _configured = True
    logging.getLogger().setLevel(level.upper())


def get_correlation_id() -> str | None:
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Bind a correlation id to the current context, generating one if None."""
    correlation_id = correlation_id or str(uuid.uuid4())
    _correlation_id.set(correlation_id)
    return correlation_id


def clear_correlation_id() -> None:
    _correlation_id.set(None)


def set_request_context(**values: Any) -> None:
    """Attach request attributes (method, path, ...) to later log records."""
    _request_context.set(dict(values))


def clear_request_context() -> None:
    _request_context.set(None)


def get_logging_context() -> dict[str, Any]:
    """Snapshot of the context added to every record."""
    context: dict[str, Any] = {"timestamp": datetime.now().isoformat()}
    correlation_id = _correlation_id.get()
    if correlation_id:
        context["correlation_id"] = correlation_id
    context.update(_request_context.get() or {})
    return context


class ContextualLoggerAdapter(logging.LoggerAdapter):
    """LoggerAdapter merging the logging context under the caller's ``extra``."""

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        kwargs["extra"] = {**get_logging_context(), **(kwargs.get("extra") or {})}
        return msg, kwargs


def get_logger(name: str) -> ContextualLoggerAdapter:
    return ContextualLoggerAdapter(logging.getLogger(name), {})


def log_operation(
    logger: logging.Logger | logging.LoggerAdapter,
    operation: str,
    level: int = logging.INFO,
    success: bool = True,
    duration_ms: float | None = None,
    **context: Any,
) -> None:
    """
    Log the outcome of a named operation as one record.

    The message reads ``Operation: repository.add (duration: 1.50ms)`` or
    ``Operation failed: repository.add``.
    """
    extra = {**get_logging_context(), **context, "operation": operation, "success": success}
    message = f"Operation: {operation}" if success else f"Operation failed: {operation}"
    if duration_ms is not None:
        extra["duration_ms"] = round(duration_ms, 2)
        message = f"{message} (duration: {duration_ms:.2f}ms)"
    logger.log(level, message, extra=extra)


class LogService:
    """
    Process-wide logging service.

    Holds a single logger handle and no per-request state, so one instance is
    shared by every concurrent request. Each method issues exactly one logging
    call; stdlib handlers lock around emit, so records never interleave.

    Usage:
        log = LogService()
        log.info("Driver created", driver_id=4)
    """

    def __init__(self, logger: logging.Logger | logging.LoggerAdapter | None = None):
        if isinstance(logger, logging.Logger):
            logger = ContextualLoggerAdapter(logger, {})
        self.logger = logger or get_logger(SERVICE_LOGGER_NAME)

    def debug(self, message: str, **context: Any) -> None:
        self.logger.debug(message, extra=context)

    def info(self, message: str, **context: Any) -> None:
        self.logger.info(message, extra=context)

    def warning(self, message: str, **context: Any) -> None:
        self.logger.warning(message, extra=context)

    def error(self, message: str, **context: Any) -> None:
        self.logger.error(message, extra=context)

    def exception(self, message: str, exc: BaseException, **context: Any) -> None:
        """Log ``exc`` with its traceback at ERROR level."""
        self.logger.error(
            message,
            exc_info=(type(exc), exc, exc.__traceback__),
            extra={"error_type": type(exc).__name__, **context},
        )

    def log_operation(
        self,
        operation: str,
        success: bool = True,
        duration_ms: float | None = None,
        **context: Any,
    ) -> None:
        log_operation(
            self.logger,
            operation,
            level=logging.INFO if success else logging.WARNING,
            success=success,
            duration_ms=duration_ms,
            **context,
        )
