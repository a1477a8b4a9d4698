"""JSON and CSV adapters over the read-only collector accessors."""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Iterable, Mapping
from dataclasses import asdict
from datetime import UTC, datetime
from typing import Any

from .audit import AuditEntry
from .comparison import UserComparison
from .exceptions import FeatureFlagError, FeatureFlagErrorCodes
from .models import FlagDefinition, PercentageRule, RolePercentageRule, RoleRule
from .monitor import MetricsSource

AUDIT_CSV_HEADER = ["ID", "Flag", "User ID", "Role", "Action", "Old Value", "New Value", "Timestamp"]


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    if isinstance(value, Mapping):
        return dict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _dumps(data: Any) -> str:
    return json.dumps(data, indent=2, default=_json_default)


def _entry_dict(entry: AuditEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "flag": entry.flag,
        "user": {"id": entry.user.id, "role": entry.user.role},
        "action": str(entry.action),
        "oldValue": entry.old_value,
        "newValue": entry.new_value,
        "timestamp": entry.timestamp,
        "metadata": entry.metadata,
    }


def audit_to_json(entries: Iterable[AuditEntry]) -> str:
    return _dumps([_entry_dict(e) for e in entries])


def audit_to_csv(entries: Iterable[AuditEntry]) -> str:
    """CSV with a header row; an empty entry list gives an empty string."""
    rows = [
        [
            e.id,
            e.flag,
            e.user.id,
            e.user.role,
            str(e.action),
            "" if e.old_value is None else str(e.old_value).lower(),
            str(e.new_value).lower(),
            e.timestamp.isoformat(),
        ]
        for e in entries
    ]
    if not rows:
        return ""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(AUDIT_CSV_HEADER)
    writer.writerows(rows)
    return buffer.getvalue().rstrip("\n")


def metrics_to_json(source: MetricsSource) -> str:
    return _dumps(
        {
            "metrics": [asdict(s) for s in source.get_metrics()],
            "stats": {name: asdict(s) for name, s in source.get_all_stats().items()},
            "timestamp": datetime.now(UTC),
        }
    )


def comparison_to_json(comparison: UserComparison) -> str:
    a, b = comparison.user_a, comparison.user_b
    return _dumps(
        {
            "users": {
                "a": {"id": a.id, "role": a.role},
                "b": {"id": b.id, "role": b.role},
            },
            "similarity": comparison.similarity,
            "comparisons": [
                {"flag": c.flag, "stateA": c.state_a, "stateB": c.state_b, "differs": c.differs}
                for c in comparison.flags
            ],
            "differences": [c.flag for c in comparison.differences],
            "exclusive": {"a": comparison.exclusive_to_a, "b": comparison.exclusive_to_b},
            "shared": comparison.shared,
            "timestamp": datetime.now(UTC),
        }
    )


def _rule_dict(rule: RoleRule | PercentageRule | RolePercentageRule) -> dict[str, Any]:
    if isinstance(rule, RoleRule):
        return {"userRoles": sorted(rule.roles)}
    if isinstance(rule, PercentageRule):
        return {"percentageOfUsers": rule.percentage}
    return {"userRoles": sorted(rule.roles), "percentageOfUsers": rule.percentage}


def flags_to_json(flags: Mapping[str, FlagDefinition]) -> str:
    """Serialize a flag table in the same shape :func:`parse_flags_json` reads."""
    return _dumps(
        {
            "flags": {
                name: value if isinstance(value, bool) else [_rule_dict(r) for r in value]
                for name, value in flags.items()
            }
        }
    )


def parse_flags_json(text: str) -> dict[str, Any]:
    """Parse exported flags; accepts ``{"flags": {...}}`` or a bare mapping.

    The result is raw data; pass it to ``validate_import`` or
    ``build_flag_table`` before use.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise FeatureFlagError(
            FeatureFlagErrorCodes.PARSE_JSON,
            f"Failed to parse JSON: {e}",
            cause=e,
        ) from e
    if isinstance(data, dict) and isinstance(data.get("flags"), dict):
        return data["flags"]
    return data
