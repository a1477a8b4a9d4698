"""OpenTelemetry instruments for flag evaluation."""

from __future__ import annotations

from opentelemetry import metrics

_meter = metrics.get_meter("featuregate", version="0.1.0")

operation_duration_seconds = _meter.create_histogram(
    name="featuregate.operation.duration",
    description="Duration of measured feature flag operations",
    unit="s",
)

flag_checks_total = _meter.create_counter(
    name="featuregate.flag.checks",
    description="Total number of tracked feature flag checks",
    unit="1",
)
