"""Validation of externally supplied flag definitions."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

ROLE_KEYS = ("userRoles", "user_roles")
PERCENTAGE_KEYS = ("percentageOfUsers", "percentage_of_users")


@dataclass(frozen=True)
class ImportValidationError:
    """A single problem found in imported flag data."""

    field: str
    message: str
    code: str = ""

    def __post_init__(self) -> None:
        if not self.code:
            object.__setattr__(self, "code", f"INVALID_{self.field.upper()}")


@dataclass
class ImportValidationResult:
    """All problems found in one validation pass."""

    errors: list[ImportValidationError] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def add(self, field_name: str, message: str, code: str) -> None:
        self.errors.append(ImportValidationError(field_name, message, code))

    def messages(self) -> list[str]:
        return [f"{e.field}: {e.message}" for e in self.errors]


def rule_conditions(rule: Mapping[str, Any]) -> tuple[Any, Any]:
    """Return ``(user_roles, percentage_of_users)`` from a rule mapping."""
    roles = next((rule[k] for k in ROLE_KEYS if k in rule), None)
    percentage = next((rule[k] for k in PERCENTAGE_KEYS if k in rule), None)
    return roles, percentage


def validate_import(data: Any) -> ImportValidationResult:
    """Check a raw ``{flag: bool | [rule, ...]}`` mapping.

    Never raises; every problem is collected so a whole batch can be reported
    at once.
    """
    result = ImportValidationResult()
    if not isinstance(data, Mapping):
        result.add("data", "data must be a mapping of flag names", "INVALID_DATA")
        return result

    for key, value in data.items():
        if not isinstance(key, str) or not key:
            result.add(str(key), "flag name must be a non-empty string", "INVALID_FLAG_NAME")
            continue
        if isinstance(value, bool):
            continue
        if not isinstance(value, list):
            result.add(key, "value must be a boolean or a list of rules", "INVALID_VALUE")
            continue
        for index, rule in enumerate(value):
            _validate_rule(result, f"{key}[{index}]", rule)
    return result


def _validate_rule(result: ImportValidationResult, path: str, rule: Any) -> None:
    if not isinstance(rule, Mapping):
        result.add(path, "rule must be a mapping", "INVALID_RULE")
        return

    unknown = sorted(str(k) for k in rule if k not in ROLE_KEYS + PERCENTAGE_KEYS)
    if unknown:
        result.add(path, f"unknown rule fields: {', '.join(unknown)}", "UNKNOWN_FIELD")

    roles, percentage = rule_conditions(rule)
    if roles is None and percentage is None:
        result.add(path, "rule must specify userRoles or percentageOfUsers", "MISSING_CONDITION")
        return

    if roles is not None and (
        not isinstance(roles, list) or not all(isinstance(r, str) for r in roles)
    ):
        result.add(f"{path}.userRoles", "userRoles must be a list of strings", "INVALID_ROLES")

    if percentage is not None and (
        isinstance(percentage, bool)
        or not isinstance(percentage, (int, float))
        or not 0.0 <= percentage <= 1.0
    ):
        result.add(
            f"{path}.percentageOfUsers",
            "percentageOfUsers must be a number in [0, 1]",
            "INVALID_PERCENTAGE",
        )
