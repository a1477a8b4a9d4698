"""Configuration models (pydantic BaseModel)."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class LogSection(BaseModel):
    """Logging settings."""

    level: str = "INFO"
    format: Literal["json", "text"] = "json"


class MonitoringSection(BaseModel):
    """Performance monitor settings."""

    enabled: bool = False
    max_metrics: int = Field(default=1000, ge=1)
    latency_budget_ms: float = Field(default=0.1, gt=0.0)
    health_check_iterations: int = Field(default=1000, ge=1)


class AuditSection(BaseModel):
    """Audit log settings."""

    enabled: bool = True
    max_entries: int = Field(default=10000, ge=1)


class OverrideSection(BaseModel):
    """Environment override settings."""

    enabled: bool = True
    env_prefix: str = "FF_"


class FeatureGateConfig(BaseModel):
    """Complete featuregate configuration.

    ``flags`` holds the raw table; rules are validated and converted by
    :func:`featuregate.loader.build_flag_table`.
    """

    flags: dict[str, Any] = Field(default_factory=dict)
    log: LogSection = Field(default_factory=LogSection)
    monitoring: MonitoringSection = Field(default_factory=MonitoringSection)
    audit: AuditSection = Field(default_factory=AuditSection)
    overrides: OverrideSection = Field(default_factory=OverrideSection)
