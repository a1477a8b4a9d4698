"""featuregate: feature flag resolution library."""

from .analytics import (
    AnalyticsTracker,
    CallbackAnalytics,
    FlagEvent,
    FlagEventType,
    FlagUsageStats,
    InMemoryAnalytics,
    LoggingAnalytics,
    UserUsageStats,
    flag_usage_stats,
    track_check,
    user_usage_stats,
)
from .audit import AuditAction, AuditEntry, AuditLog, AuditStats
from .comparison import (
    FlagComparison,
    Snapshot,
    SnapshotDiff,
    UserComparison,
    compare_against_many,
    compare_users,
    comparison_report,
    create_snapshot,
    diff_snapshots,
    find_similar_users,
)
from .exceptions import ConfigurationError, FeatureFlagError, FeatureFlagErrorCodes
from .gate import FeatureGate
from .hashing import MAX_UINT32, bucket, murmurhash3_32
from .health import (
    CheckResult,
    EvaluationLatencyCheck,
    FlagTableCheck,
    HealthCheck,
    HealthChecker,
    HealthResponse,
    HealthStatus,
    MonitorCheck,
    perform_health_check,
)
from .ids import IdGenerator, TimestampIdGenerator, uuid_id
from .loader import build_flag_table, load
from .logger import new_logger
from .models import (
    EvaluationResult,
    FlagDefinition,
    PercentageRule,
    RolePercentageRule,
    RoleRule,
    Rule,
    User,
    make_rule,
)
from .monitor import MetricSample, MetricsSource, OperationStats, PerformanceMonitor, percentile
from .overrides import get_env_override, is_dev_mode, load_env_overrides, parse_override
from .resolver import FlagResolver, evaluate
from .settings import FeatureGateConfig
from .validation import ImportValidationError, ImportValidationResult, validate_import

__all__ = [
    "AnalyticsTracker",
    "AuditAction",
    "AuditEntry",
    "AuditLog",
    "AuditStats",
    "CallbackAnalytics",
    "CheckResult",
    "ConfigurationError",
    "EvaluationLatencyCheck",
    "EvaluationResult",
    "FeatureFlagError",
    "FeatureFlagErrorCodes",
    "FeatureGate",
    "FeatureGateConfig",
    "FlagComparison",
    "FlagDefinition",
    "FlagEvent",
    "FlagEventType",
    "FlagResolver",
    "FlagTableCheck",
    "FlagUsageStats",
    "HealthCheck",
    "HealthChecker",
    "HealthResponse",
    "HealthStatus",
    "IdGenerator",
    "ImportValidationError",
    "ImportValidationResult",
    "InMemoryAnalytics",
    "LoggingAnalytics",
    "MAX_UINT32",
    "MetricSample",
    "MetricsSource",
    "MonitorCheck",
    "OperationStats",
    "PercentageRule",
    "PerformanceMonitor",
    "RolePercentageRule",
    "RoleRule",
    "Rule",
    "Snapshot",
    "SnapshotDiff",
    "TimestampIdGenerator",
    "User",
    "UserComparison",
    "UserUsageStats",
    "build_flag_table",
    "bucket",
    "compare_against_many",
    "compare_users",
    "comparison_report",
    "create_snapshot",
    "diff_snapshots",
    "evaluate",
    "find_similar_users",
    "flag_usage_stats",
    "get_env_override",
    "is_dev_mode",
    "load",
    "load_env_overrides",
    "make_rule",
    "murmurhash3_32",
    "new_logger",
    "parse_override",
    "percentile",
    "perform_health_check",
    "track_check",
    "user_usage_stats",
    "uuid_id",
    "validate_import",
]
