"""Performance monitoring for flag operations.

:class:`PerformanceMonitor` keeps a bounded, FIFO-evicting buffer of timing
samples and derives per-operation statistics from it on demand.
"""

from __future__ import annotations

import math
import threading
import time
from collections import deque
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Any, Protocol, TypeVar

import structlog

from .metrics import operation_duration_seconds
from .models import as_utc

T = TypeVar("T")

DEFAULT_MAX_METRICS = 1000

logger = structlog.stdlib.get_logger(__name__)


@dataclass(frozen=True)
class MetricSample:
    """One timed operation."""

    operation_name: str
    duration_ms: float
    timestamp: datetime
    metadata: Mapping[str, Any] | None = None


@dataclass(frozen=True)
class OperationStats:
    """Aggregate timings of one operation, in milliseconds."""

    count: int
    avg_duration_ms: float
    min_duration_ms: float
    max_duration_ms: float
    total_duration_ms: float
    p50: float
    p95: float
    p99: float


class MetricsSource(Protocol):
    """Read access shared by every metrics collector."""

    def get_metrics(self) -> list[MetricSample]: ...

    def get_metrics_by_operation(self, operation_name: str) -> list[MetricSample]: ...

    def get_metrics_by_time_range(self, start: datetime, end: datetime) -> list[MetricSample]: ...

    def get_operation_stats(self, operation_name: str) -> OperationStats | None: ...

    def get_all_stats(self) -> dict[str, OperationStats]: ...


def percentile(sorted_values: Sequence[float], p: float) -> float:
    """Nearest-rank percentile of an ascending, non-empty sequence."""
    n = len(sorted_values)
    index = math.ceil(p / 100 * n) - 1
    return sorted_values[min(max(index, 0), n - 1)]


def compute_stats(samples: Sequence[MetricSample]) -> OperationStats | None:
    if not samples:
        return None
    durations = sorted(s.duration_ms for s in samples)
    total = sum(durations)
    return OperationStats(
        count=len(durations),
        avg_duration_ms=total / len(durations),
        min_duration_ms=durations[0],
        max_duration_ms=durations[-1],
        total_duration_ms=total,
        p50=percentile(durations, 50),
        p95=percentile(durations, 95),
        p99=percentile(durations, 99),
    )


class PerformanceMonitor:
    """Bounded collector of operation timings.

    Disabled by default; while disabled :meth:`measure` only calls through.
    All buffer access is serialized by one lock and queries work on a copy,
    so results are a point-in-time view.
    """

    def __init__(self, max_metrics: int = DEFAULT_MAX_METRICS, enabled: bool = False) -> None:
        if max_metrics < 1:
            raise ValueError("max_metrics must be >= 1")
        self._lock = threading.Lock()
        self._samples: deque[MetricSample] = deque(maxlen=max_metrics)
        self._enabled = enabled

    @property
    def max_metrics(self) -> int:
        return self._samples.maxlen or 0

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool) -> None:
        with self._lock:
            self._enabled = enabled

    def __len__(self) -> int:
        with self._lock:
            return len(self._samples)

    def measure(
        self,
        operation_name: str,
        fn: Callable[[], T],
        metadata: Mapping[str, Any] | None = None,
    ) -> T:
        """Call ``fn`` and record how long it took.

        A failing call is recorded with an ``error`` entry in its metadata and
        the original exception is re-raised unchanged.
        """
        if not self._enabled:
            return fn()

        start = time.perf_counter()
        try:
            result = fn()
        except BaseException as e:
            self._record_timing(operation_name, start, metadata, e)
            raise
        self._record_timing(operation_name, start, metadata)
        return result

    async def measure_async(
        self,
        operation_name: str,
        fn: Callable[[], Awaitable[T]],
        metadata: Mapping[str, Any] | None = None,
    ) -> T:
        """Coroutine variant of :meth:`measure`; cancellation is recorded too."""
        if not self._enabled:
            return await fn()

        start = time.perf_counter()
        try:
            result = await fn()
        except BaseException as e:
            self._record_timing(operation_name, start, metadata, e)
            raise
        self._record_timing(operation_name, start, metadata)
        return result

    def record_metric(self, sample: MetricSample) -> None:
        """Append a sample, evicting the oldest one at capacity.

        The sample keeps its own copy of ``metadata``.
        """
        if sample.metadata is not None:
            sample = replace(sample, metadata=dict(sample.metadata))
        with self._lock:
            if not self._enabled:
                return
            self._samples.append(sample)
        try:
            operation_duration_seconds.record(
                sample.duration_ms / 1000.0, {"operation": sample.operation_name}
            )
        except Exception as e:
            logger.warning("telemetry_export_failed", operation=sample.operation_name, error=str(e))

    def get_metrics(self) -> list[MetricSample]:
        with self._lock:
            return list(self._samples)

    def get_metrics_by_operation(self, operation_name: str) -> list[MetricSample]:
        return [s for s in self.get_metrics() if s.operation_name == operation_name]

    def get_metrics_by_time_range(self, start: datetime, end: datetime) -> list[MetricSample]:
        """Samples with ``start <= timestamp <= end``; naive bounds are taken as UTC."""
        start, end = as_utc(start), as_utc(end)
        return [s for s in self.get_metrics() if start <= s.timestamp <= end]

    def get_operation_stats(self, operation_name: str) -> OperationStats | None:
        """Statistics for one operation, or ``None`` when it has no samples."""
        return compute_stats(self.get_metrics_by_operation(operation_name))

    def get_all_stats(self) -> dict[str, OperationStats]:
        grouped: dict[str, list[MetricSample]] = {}
        for sample in self.get_metrics():
            grouped.setdefault(sample.operation_name, []).append(sample)
        return {name: stats for name, samples in grouped.items() if (stats := compute_stats(samples))}

    def clear(self) -> None:
        with self._lock:
            self._samples.clear()

    def generate_report(self) -> str:
        samples = self.get_metrics()
        stats = self.get_all_stats()
        lines = [
            "Feature Flag Performance Monitoring Report",
            "==========================================",
            "",
            f"Generated: {datetime.now(UTC).isoformat()}",
            f"Total Metrics: {len(samples)}",
            f"Monitored Operations: {len(stats)}",
            "",
        ]
        for operation, s in stats.items():
            title = f"Operation: {operation}"
            lines += [
                title,
                "=" * len(title),
                f"Count: {s.count}",
                f"Average: {s.avg_duration_ms:.4f}ms",
                f"Min: {s.min_duration_ms:.4f}ms",
                f"Max: {s.max_duration_ms:.4f}ms",
                f"P50: {s.p50:.4f}ms",
                f"P95: {s.p95:.4f}ms",
                f"P99: {s.p99:.4f}ms",
                "",
            ]
        return "\n".join(lines)

    def _record_timing(
        self,
        operation_name: str,
        start: float,
        metadata: Mapping[str, Any] | None,
        error: BaseException | None = None,
    ) -> None:
        duration_ms = (time.perf_counter() - start) * 1000.0
        if error is not None:
            metadata = {**(metadata or {}), "error": str(error) or type(error).__name__}
        try:
            self.record_metric(
                MetricSample(
                    operation_name=operation_name,
                    duration_ms=duration_ms,
                    timestamp=datetime.now(UTC),
                    metadata=metadata,
                )
            )
        except Exception as e:
            logger.warning("telemetry_record_failed", operation=operation_name, error=str(e))
