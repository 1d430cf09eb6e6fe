"""
Health check utilities for the McLaren API.

Provides health check functions for monitoring system status.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
    """Health status enumeration."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"
    UNKNOWN = "unknown"


@dataclass
class HealthCheckResult:
    """Result of a health check."""

    name: str
    status: HealthStatus
    message: str
    details: dict[str, Any] | None = None
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "status": self.status.value,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


class HealthChecker:
    """
    Runs registered health checks and reports the worst status among them.

    A check that raises is reported as UNKNOWN under its function name; an
    empty checker reports UNKNOWN as well.
    """

    _SEVERITY = {
        HealthStatus.HEALTHY: 0,
        HealthStatus.UNKNOWN: 1,
        HealthStatus.DEGRADED: 2,
        HealthStatus.UNHEALTHY: 3,
    }

    def __init__(self):
        self._checks: list[Callable[[], Awaitable[HealthCheckResult]]] = []

    def register_check(self, check_func: Callable[[], Awaitable[HealthCheckResult]]) -> None:
        self._checks.append(check_func)

    async def _run(self, check_func: Callable[[], Awaitable[HealthCheckResult]]) -> HealthCheckResult:
        try:
            return await check_func()
        except (RuntimeError, ValueError, TypeError, AttributeError, OSError) as e:
            name = getattr(check_func, "__name__", "check")
            logger.error(f"Health check {name} raised: {e}", exc_info=True)
            return HealthCheckResult(name, HealthStatus.UNKNOWN, f"Check failed: {e}")

    async def check_all(self) -> dict[str, Any]:
        """Run every check in registration order."""
        results = [await self._run(check) for check in self._checks]
        overall = max(
            (r.status for r in results), key=self._SEVERITY.__getitem__, default=HealthStatus.UNKNOWN
        )
        return {
            "status": overall.value,
            "timestamp": datetime.now().isoformat(),
            "checks": [r.to_dict() for r in results],
        }


async def check_database_health(
    database: Any | None, timeout_seconds: float = 5.0
) -> HealthCheckResult:
    """
    Check connectivity of the selected storage backend.

    Args:
        database: DatabaseManager instance
        timeout_seconds: Timeout for the ping

    Returns:
        HealthCheckResult
    """
    if database is None or not database.initialized:
        return HealthCheckResult(
            name="database",
            status=HealthStatus.UNHEALTHY,
            message="Database not initialized",
        )

    details = {"provider": database.storage.provider.value, "timeout_seconds": timeout_seconds}
    try:
        await database.ping(timeout_seconds=timeout_seconds)
        return HealthCheckResult(
            name="database",
            status=HealthStatus.HEALTHY,
            message="Database connection is healthy",
            details=details,
        )
    except asyncio.TimeoutError:
        return HealthCheckResult(
            name="database",
            status=HealthStatus.UNHEALTHY,
            message=f"Database ping timed out after {timeout_seconds}s",
            details=details,
        )
    except (SQLAlchemyError, OSError) as e:
        logger.warning(f"Database health check failed: {e}")
        return HealthCheckResult(
            name="database",
            status=HealthStatus.UNHEALTHY,
            message="Database health check failed",
            details={**details, "error_type": type(e).__name__},
        )
