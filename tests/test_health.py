"""Health check unit tests."""

from featuregate import (
    EvaluationLatencyCheck,
    FlagResolver,
    FlagTableCheck,
    HealthCheck,
    HealthChecker,
    HealthStatus,
    MonitorCheck,
    PerformanceMonitor,
    perform_health_check,
)


class FailingCheck(HealthCheck):
    @property
    def name(self) -> str:
        return "failing"

    async def check(self) -> str | None:
        raise RuntimeError("down")


async def test_health_check_passes(scenario_resolver: FlagResolver) -> None:
    """A populated table within budget is healthy."""
    monitor = PerformanceMonitor(enabled=True)
    response = await perform_health_check(scenario_resolver, monitor, iterations=100, budget_ms=50.0)
    assert response.healthy
    assert set(response.checks) == {
        "feature_flags_accessible",
        "flag_evaluation_performance",
        "monitoring_system",
    }
    assert response.checks["feature_flags_accessible"].message == "Found 3 feature flags"
    assert response.checks["monitoring_system"].message == "0 metrics recorded"


async def test_empty_flag_table_is_unhealthy() -> None:
    """An empty flag table fails the health check."""
    response = await perform_health_check(FlagResolver({}), PerformanceMonitor(), iterations=10)
    assert response.status == HealthStatus.UNHEALTHY
    assert not response.checks["feature_flags_accessible"].passed
    assert "Found 0 feature flags" in (response.checks["feature_flags_accessible"].message or "")
    assert response.checks["monitoring_system"].passed


async def test_latency_over_budget_fails(scenario_resolver: FlagResolver) -> None:
    """Evaluation slower than the budget fails."""
    check = EvaluationLatencyCheck(scenario_resolver, iterations=10, budget_ms=0.0)
    checker = HealthChecker()
    checker.add(check)
    response = await checker.run_all()
    result = response.checks["flag_evaluation_performance"]
    assert result.status == HealthStatus.UNHEALTHY
    assert "exceeds budget" in (result.message or "")


async def test_checker_aggregates_failures(scenario_resolver: FlagResolver) -> None:
    """One failing check makes the whole response unhealthy."""
    checker = HealthChecker()
    checker.add(FlagTableCheck(scenario_resolver))
    checker.add(FailingCheck())
    response = await checker.run_all()
    assert response.status == HealthStatus.UNHEALTHY
    assert response.checks["feature_flags_accessible"].passed
    assert response.checks["failing"].message == "down"
    assert response.checks["failing"].duration_ms is not None


async def test_monitor_check_counts_samples() -> None:
    """The monitor check reports retained samples."""
    monitor = PerformanceMonitor(enabled=True)
    monitor.measure("op", lambda: None)
    assert await MonitorCheck(monitor).check() == "1 metrics recorded"
