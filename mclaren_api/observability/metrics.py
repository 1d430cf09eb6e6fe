"""
Operation metrics for the McLaren API.

Timings are kept per (operation, entity) pair, e.g. ``repository.add`` for
``Driver``, and rolled up per operation for the health endpoint.
"""

import functools
import inspect
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

MetricKey = tuple[str, str | None]


@dataclass
class OperationMetrics:
    """Running statistics for one operation, optionally for one entity kind."""

    operation: str
    entity: str | None = None
    calls: int = 0
    failures: int = 0
    total_ms: float = 0.0
    fastest_ms: float | None = None
    slowest_ms: float = 0.0
    last_seen: datetime | None = field(default=None, compare=False)

    @property
    def label(self) -> str:
        return f"{self.operation}[{self.entity}]" if self.entity else self.operation

    @property
    def mean_ms(self) -> float:
        return self.total_ms / self.calls if self.calls else 0.0

    @property
    def failure_rate(self) -> float:
        """Failed calls as a percentage of all calls."""
        return self.failures / self.calls * 100 if self.calls else 0.0

    def add(self, duration_ms: float, success: bool = True) -> None:
        self.calls += 1
        self.total_ms += duration_ms
        self.slowest_ms = max(self.slowest_ms, duration_ms)
        self.fastest_ms = (
            duration_ms if self.fastest_ms is None else min(self.fastest_ms, duration_ms)
        )
        if not success:
            self.failures += 1
        self.last_seen = datetime.now()

    def absorb(self, other: "OperationMetrics") -> None:
        """Fold another entry's totals into this one."""
        self.calls += other.calls
        self.failures += other.failures
        self.total_ms += other.total_ms
        self.slowest_ms = max(self.slowest_ms, other.slowest_ms)
        if other.fastest_ms is not None:
            self.fastest_ms = (
                other.fastest_ms
                if self.fastest_ms is None
                else min(self.fastest_ms, other.fastest_ms)
            )
        if other.last_seen and (self.last_seen is None or other.last_seen > self.last_seen):
            self.last_seen = other.last_seen

    def to_dict(self) -> dict[str, Any]:
        return {
            "operation": self.operation,
            "entity": self.entity,
            "count": self.calls,
            "avg_duration_ms": round(self.mean_ms, 2),
            "min_duration_ms": round(self.fastest_ms or 0.0, 2),
            "max_duration_ms": round(self.slowest_ms, 2),
            "error_count": self.failures,
            "error_rate_percent": round(self.failure_rate, 2),
            "last_execution": self.last_seen.isoformat() if self.last_seen else None,
        }


class MetricsCollector:
    """
    Thread-safe store of OperationMetrics.

    At most ``capacity`` (operation, entity) pairs are tracked; recording a new
    pair beyond that drops the least recently recorded one.
    """

    def __init__(self, capacity: int = 1000):
        self._entries: OrderedDict[MetricKey, OperationMetrics] = OrderedDict()
        self._lock = threading.Lock()
        self.capacity = capacity

    def record_operation(
        self,
        operation: str,
        duration_ms: float,
        success: bool = True,
        entity: str | None = None,
    ) -> None:
        key = (operation, entity)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                if len(self._entries) >= self.capacity:
                    self._entries.popitem(last=False)
                entry = self._entries[key] = OperationMetrics(operation, entity)
            else:
                self._entries.move_to_end(key)
            entry.add(duration_ms, success)

    def get_metrics(self, prefix: str | None = None) -> dict[str, Any]:
        """Every tracked entry keyed by label, optionally limited to an operation prefix."""
        with self._lock:
            metrics = {
                entry.label: entry.to_dict()
                for (operation, _), entry in self._entries.items()
                if prefix is None or operation.startswith(prefix)
            }
            tracked = len(self._entries)
        return {
            "timestamp": datetime.now().isoformat(),
            "total_operations": tracked,
            "metrics": metrics,
        }

    def get_summary(self) -> dict[str, Any]:
        """Entries rolled up per operation across entity kinds."""
        rollup: dict[str, OperationMetrics] = {}
        with self._lock:
            for (operation, _), entry in self._entries.items():
                rollup.setdefault(operation, OperationMetrics(operation)).absorb(entry)
            tracked = len(self._entries)
        return {
            "timestamp": datetime.now().isoformat(),
            "total_operations": tracked,
            "summary": {operation: entry.to_dict() for operation, entry in rollup.items()},
        }

    def get_operation_count(self, operation: str) -> int:
        with self._lock:
            return sum(e.calls for (name, _), e in self._entries.items() if name == operation)

    def reset(self) -> None:
        with self._lock:
            self._entries.clear()


_metrics_collector: MetricsCollector | None = None


def get_metrics_collector() -> MetricsCollector:
    """Process-wide collector, created on first use."""
    global _metrics_collector
    if _metrics_collector is None:
        _metrics_collector = MetricsCollector()
    return _metrics_collector


def record_operation(
    operation: str, duration_ms: float, success: bool = True, entity: str | None = None
) -> None:
    get_metrics_collector().record_operation(operation, duration_ms, success, entity)


def timed_operation(operation: str, entity: str | None = None):
    """
    Time every call of a coroutine function and record it.

    Usage:
        @timed_operation("database.seed")
        async def seed_initial_data(context):
            ...
    """

    def decorator(func: Callable) -> Callable:
        if not inspect.iscoroutinefunction(func):
            raise TypeError("timed_operation only decorates coroutine functions")

        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            started = time.perf_counter()
            success = False
            try:
                result = await func(*args, **kwargs)
                success = True
                return result
            finally:
                record_operation(
                    operation, (time.perf_counter() - started) * 1000, success, entity
                )

        return wrapper

    return decorator
