"""
Observability components.

Provides structured logging, the shared LogService, metrics collection
and health check capabilities.
"""

from .health import (
    HealthChecker,
    HealthCheckResult,
    HealthStatus,
    check_database_health,
)
from .logging import (
    ContextualLoggerAdapter,
    LogService,
    clear_correlation_id,
    clear_request_context,
    configure_logging,
    get_correlation_id,
    get_logger,
    get_logging_context,
    log_operation,
    set_correlation_id,
    set_request_context,
)
from .metrics import (
    MetricsCollector,
    OperationMetrics,
    get_metrics_collector,
    record_operation,
    timed_operation,
)

__all__ = [
    # Metrics
    "MetricsCollector",
    "OperationMetrics",
    "get_metrics_collector",
    "record_operation",
    "timed_operation",
    # Logging
    "configure_logging",
    "get_correlation_id",
    "set_correlation_id",
    "clear_correlation_id",
    "set_request_context",
    "clear_request_context",
    "get_logging_context",
    "ContextualLoggerAdapter",
    "LogService",
    "get_logger",
    "log_operation",
    # Health
    "HealthStatus",
    "HealthCheckResult",
    "HealthChecker",
    "check_database_health",
]
