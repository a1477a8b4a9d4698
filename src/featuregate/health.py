"""Health checks for the flag system."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from .exceptions import FeatureFlagError, FeatureFlagErrorCodes
from .models import User
from .monitor import PerformanceMonitor
from .resolver import FlagResolver


class HealthStatus(str, Enum):
    """Health status enum."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


@dataclass
class CheckResult:
    """Result of a single health check."""

    status: HealthStatus
    message: str | None = None
    duration_ms: float | None = None

    @property
    def passed(self) -> bool:
        return self.status == HealthStatus.HEALTHY


@dataclass
class HealthResponse:
    """Aggregated health check response."""

    status: HealthStatus
    checks: dict[str, CheckResult] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def healthy(self) -> bool:
        return self.status == HealthStatus.HEALTHY


class HealthCheck(ABC):
    """Abstract health check.

    ``check`` returns an optional message on success and raises on failure.
    """

    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    async def check(self) -> str | None: ...


class FlagTableCheck(HealthCheck):
    """The flag table is reachable and not empty."""

    def __init__(self, resolver: FlagResolver) -> None:
        self._resolver = resolver

    @property
    def name(self) -> str:
        return "feature_flags_accessible"

    async def check(self) -> str | None:
        count = len(self._resolver.flag_names)
        if count == 0:
            raise FeatureFlagError(
                FeatureFlagErrorCodes.HEALTH_CHECK_FAILED, "Found 0 feature flags"
            )
        return f"Found {count} feature flags"


class EvaluationLatencyCheck(HealthCheck):
    """Average resolution time over ``iterations`` calls stays under budget."""

    def __init__(
        self,
        resolver: FlagResolver,
        *,
        iterations: int = 1000,
        budget_ms: float = 0.1,
        flag_name: str | None = None,
        user: User | None = None,
    ) -> None:
        self._resolver = resolver
        self._iterations = iterations
        self._budget_ms = budget_ms
        self._flag_name = flag_name
        self._user = user or User(id="health-check", role="user")

    @property
    def name(self) -> str:
        return "flag_evaluation_performance"

    async def check(self) -> str | None:
        flag_name = self._flag_name
        if flag_name is None:
            if not self._resolver.flag_names:
                raise FeatureFlagError(
                    FeatureFlagErrorCodes.HEALTH_CHECK_FAILED, "No feature flags to evaluate"
                )
            flag_name = self._resolver.flag_names[0]

        start = time.perf_counter()
        for _ in range(self._iterations):
            self._resolver.resolve(flag_name, self._user)
        avg_ms = (time.perf_counter() - start) * 1000.0 / self._iterations

        message = f"Average evaluation time: {avg_ms:.4f}ms"
        if avg_ms >= self._budget_ms:
            raise FeatureFlagError(
                FeatureFlagErrorCodes.HEALTH_CHECK_FAILED,
                f"{message} exceeds budget of {self._budget_ms}ms",
            )
        return message


class MonitorCheck(HealthCheck):
    """Reports how many samples the monitor currently retains."""

    def __init__(self, monitor: PerformanceMonitor) -> None:
        self._monitor = monitor

    @property
    def name(self) -> str:
        return "monitoring_system"

    async def check(self) -> str | None:
        return f"{len(self._monitor)} metrics recorded"


class HealthChecker:
    """Runs multiple health checks and aggregates results."""

    def __init__(self) -> None:
        self._checks: list[HealthCheck] = []

    def add(self, check: HealthCheck) -> None:
        """Register a health check."""
        self._checks.append(check)

    async def run_all(self) -> HealthResponse:
        """Run all registered checks."""
        results: dict[str, CheckResult] = {}
        overall = HealthStatus.HEALTHY
        for c in self._checks:
            start = time.perf_counter()
            try:
                message = await c.check()
                status = HealthStatus.HEALTHY
            except Exception as e:
                message = str(e)
                status = HealthStatus.UNHEALTHY
                overall = HealthStatus.UNHEALTHY
            results[c.name] = CheckResult(
                status=status,
                message=message,
                duration_ms=(time.perf_counter() - start) * 1000.0,
            )
        return HealthResponse(status=overall, checks=results)


async def perform_health_check(
    resolver: FlagResolver,
    monitor: PerformanceMonitor,
    *,
    iterations: int = 1000,
    budget_ms: float = 0.1,
) -> HealthResponse:
    """Run the standard flag table, latency and monitor checks."""
    checker = HealthChecker()
    checker.add(FlagTableCheck(resolver))
    checker.add(EvaluationLatencyCheck(resolver, iterations=iterations, budget_ms=budget_ms))
    checker.add(MonitorCheck(monitor))
    return await checker.run_all()
