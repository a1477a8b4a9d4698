"""FeatureGate: resolver wired to optional monitoring, audit and analytics."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

import structlog

from .analytics import AnalyticsTracker, track_check
from .audit import AuditLog
from .health import HealthResponse, perform_health_check
from .loader import build_flag_table
from .logger import new_logger
from .models import User
from .monitor import PerformanceMonitor
from .overrides import load_env_overrides
from .resolver import FlagResolver
from .settings import FeatureGateConfig

RESOLVE_OPERATION = "resolve"

logger = structlog.stdlib.get_logger(__name__)


class FeatureGate:
    """Entry point for flag checks.

    Collectors are passed in explicitly; a gate without them is a plain
    resolver call. Audit and analytics failures are logged and never change
    the returned value.
    """

    def __init__(
        self,
        resolver: FlagResolver,
        monitor: PerformanceMonitor | None = None,
        audit: AuditLog | None = None,
        analytics: AnalyticsTracker | None = None,
        *,
        latency_budget_ms: float = 0.1,
        health_check_iterations: int = 1000,
    ) -> None:
        self.resolver = resolver
        self.monitor = monitor
        self.audit = audit
        self.analytics = analytics
        self._latency_budget_ms = latency_budget_ms
        self._health_check_iterations = health_check_iterations

    @classmethod
    def from_config(
        cls,
        config: FeatureGateConfig,
        *,
        environ: Mapping[str, str] | None = None,
        analytics: AnalyticsTracker | None = None,
        configure_logging: bool = True,
    ) -> FeatureGate:
        """Build a gate from configuration, applying environment overrides.

        Unless ``configure_logging`` is false, structlog is set up from the
        ``log`` section first so the load itself is logged in that format.
        """
        if configure_logging:
            new_logger(config.log.level, config.log.format)
        flags = build_flag_table(config.flags)
        overrides: dict[str, bool] = {}
        if config.overrides.enabled:
            overrides = load_env_overrides(
                flags, prefix=config.overrides.env_prefix, environ=environ
            )
        if overrides:
            logger.info("flag_overrides_applied", flags=sorted(overrides))
        return cls(
            FlagResolver(flags, overrides),
            monitor=PerformanceMonitor(
                max_metrics=config.monitoring.max_metrics,
                enabled=config.monitoring.enabled,
            ),
            audit=AuditLog(
                max_entries=config.audit.max_entries,
                enabled=config.audit.enabled,
            ),
            analytics=analytics,
            latency_budget_ms=config.monitoring.latency_budget_ms,
            health_check_iterations=config.monitoring.health_check_iterations,
        )

    def is_enabled(
        self,
        flag_name: str,
        user: User,
        metadata: Mapping[str, Any] | None = None,
    ) -> bool:
        """Resolve ``flag_name`` for ``user``, measuring and recording the check.

        Raises:
            ConfigurationError: ``flag_name`` is not a known flag.
        """
        if self.monitor is not None:
            enabled = self.monitor.measure(
                RESOLVE_OPERATION,
                lambda: self.resolver.resolve(flag_name, user),
                {"flag": flag_name},
            )
        else:
            enabled = self.resolver.resolve(flag_name, user)

        if self.audit is not None:
            try:
                self.audit.log_check(flag_name, user, enabled, metadata)
            except Exception as e:
                logger.warning("audit_record_failed", flag=flag_name, error=str(e))
        if self.analytics is not None:
            track_check(self.analytics, flag_name, user, enabled, metadata)
        return enabled

    def evaluate_many(self, flag_names: Iterable[str], user: User) -> dict[str, bool]:
        return {name: self.is_enabled(name, user) for name in flag_names}

    async def health_check(self) -> HealthResponse:
        monitor = self.monitor if self.monitor is not None else PerformanceMonitor()
        return await perform_health_check(
            self.resolver,
            monitor,
            iterations=self._health_check_iterations,
            budget_ms=self._latency_budget_ms,
        )
