"""
Unit tests for MetricsCollector.

Tests metrics collection functionality including:
- Thread-safety under concurrent access
- Bounded storage with least-recently-recorded eviction
- The timed_operation decorator
"""

import threading

import pytest

from mclaren_api.observability.metrics import (MetricsCollector,
                                               get_metrics_collector,
                                               record_operation,
                                               timed_operation)


class TestMetricsCollectorThreadSafety:
    """Test thread-safety of metrics collection."""

    def test_concurrent_record_operation(self):
        """Concurrent record_operation calls lose no samples."""
        collector = MetricsCollector()
        num_threads = 10
        operations_per_thread = 100
        barrier = threading.Barrier(num_threads)

        def record_operations(thread_id: int):
            barrier.wait()
            for i in range(operations_per_thread):
                collector.record_operation(
                    "repository.add", duration_ms=1.0 + i, success=True, entity=f"E{thread_id}"
                )

        threads = [threading.Thread(target=record_operations, args=(i,)) for i in range(num_threads)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert collector.get_operation_count("repository.add") == (
            num_threads * operations_per_thread
        )


class TestMetricsCollectorBoundedStorage:
    """Test bounded storage."""

    def test_capacity_limit(self):
        collector = MetricsCollector(capacity=3)
        for i in range(5):
            collector.record_operation(f"op_{i}", duration_ms=1.0)
        assert collector.get_metrics()["total_operations"] == 3

    def test_least_recently_recorded_is_dropped(self):
        collector = MetricsCollector(capacity=2)
        collector.record_operation("first", duration_ms=1.0)
        collector.record_operation("second", duration_ms=1.0)
        collector.record_operation("first", duration_ms=1.0)
        collector.record_operation("third", duration_ms=1.0)

        keys = set(collector.get_metrics()["metrics"])
        assert keys == {"first", "third"}


class TestMetricsCollectorFunctionality:
    """Test basic collection behaviour."""

    def test_record_operation(self):
        collector = MetricsCollector()
        collector.record_operation("repository.get_by_id", duration_ms=10.0)
        collector.record_operation("repository.get_by_id", duration_ms=30.0, success=False)

        metric = collector.get_metrics()["metrics"]["repository.get_by_id"]
        assert metric["count"] == 2
        assert metric["avg_duration_ms"] == 20.0
        assert metric["min_duration_ms"] == 10.0
        assert metric["max_duration_ms"] == 30.0
        assert metric["error_count"] == 1
        assert metric["error_rate_percent"] == 50.0

    def test_record_operation_per_entity(self):
        collector = MetricsCollector()
        collector.record_operation("repository.add", duration_ms=1.0, entity="Driver")
        metrics = collector.get_metrics()["metrics"]
        assert metrics["repository.add[Driver]"]["entity"] == "Driver"

    def test_get_summary_rolls_up_entities(self):
        collector = MetricsCollector()
        collector.record_operation("repository.add", duration_ms=1.0, entity="Driver")
        collector.record_operation("repository.add", duration_ms=3.0, entity="Car")

        summary = collector.get_summary()["summary"]["repository.add"]
        assert summary["count"] == 2
        assert summary["avg_duration_ms"] == 2.0

    def test_get_metrics_filtered(self):
        collector = MetricsCollector()
        collector.record_operation("repository.add", duration_ms=1.0)
        collector.record_operation("database.initialize", duration_ms=1.0)
        assert list(collector.get_metrics("database")["metrics"]) == ["database.initialize"]

    def test_reset(self):
        collector = MetricsCollector()
        collector.record_operation("op", duration_ms=1.0)
        collector.reset()
        assert collector.get_metrics()["metrics"] == {}


class TestGlobalMetricsFunctions:
    def test_get_metrics_collector_singleton(self):
        assert get_metrics_collector() is get_metrics_collector()

    def test_record_operation_global(self):
        record_operation("global.op", duration_ms=5.0)
        assert get_metrics_collector().get_operation_count("global.op") == 1


class TestTimedOperation:
    @pytest.mark.asyncio
    async def test_records_success(self):
        @timed_operation("test.timed", entity="Driver")
        async def work():
            return 42

        assert await work() == 42
        metrics = get_metrics_collector().get_metrics("test.timed")["metrics"]
        assert metrics["test.timed[Driver]"]["count"] == 1
        assert metrics["test.timed[Driver]"]["error_count"] == 0

    @pytest.mark.asyncio
    async def test_records_failure_and_reraises(self):
        @timed_operation("test.failing")
        async def work():
            raise ValueError("boom")

        with pytest.raises(ValueError):
            await work()
        assert get_metrics_collector().get_metrics()["metrics"]["test.failing"]["error_count"] == 1

    def test_rejects_sync_functions(self):
        with pytest.raises(TypeError):

            @timed_operation("test.sync")
            def work():
                return None
