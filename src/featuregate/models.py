"""featuregate data models."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime

from .exceptions import ConfigurationError, FeatureFlagErrorCodes
from .hashing import bucket


@dataclass(frozen=True)
class User:
    """Caller identity for a single evaluation."""

    id: str
    role: str


@dataclass(frozen=True)
class RoleRule:
    """Matches users whose role is in ``roles``."""

    roles: frozenset[str]

    def matches(self, flag_name: str, user: User) -> bool:
        return user.role in self.roles

    def describe(self, flag_name: str, user: User) -> str:
        return _describe_roles(self.roles, user)


@dataclass(frozen=True)
class PercentageRule:
    """Matches users whose bucket for the flag falls below ``percentage``."""

    percentage: float

    def matches(self, flag_name: str, user: User) -> bool:
        return bucket(flag_name, user.id) < self.percentage

    def describe(self, flag_name: str, user: User) -> str:
        return _describe_percentage(self.percentage, flag_name, user)


@dataclass(frozen=True)
class RolePercentageRule:
    """Matches users passing both the role gate and the percentage gate."""

    roles: frozenset[str]
    percentage: float

    def matches(self, flag_name: str, user: User) -> bool:
        return user.role in self.roles and bucket(flag_name, user.id) < self.percentage

    def describe(self, flag_name: str, user: User) -> str:
        return (
            f"{_describe_roles(self.roles, user)}, "
            f"{_describe_percentage(self.percentage, flag_name, user)}"
        )


Rule = RoleRule | PercentageRule | RolePercentageRule

# Literal bool or an ordered tuple of rules evaluated with OR semantics.
FlagDefinition = bool | tuple[Rule, ...]


@dataclass(frozen=True)
class EvaluationResult:
    """Resolved flag value together with a human readable reason."""

    flag: str
    enabled: bool
    reason: str = ""


def make_rule(
    user_roles: Iterable[str] | None = None,
    percentage_of_users: float | None = None,
) -> Rule:
    """Build the rule variant matching the conditions that are present.

    Raises:
        ConfigurationError: neither condition is given, or the percentage is
            outside ``[0, 1]``.
    """
    if user_roles is None and percentage_of_users is None:
        raise ConfigurationError(
            FeatureFlagErrorCodes.INVALID_RULE,
            "rule must specify userRoles, percentageOfUsers, or both",
        )
    if percentage_of_users is not None:
        if isinstance(percentage_of_users, bool) or not 0.0 <= percentage_of_users <= 1.0:
            raise ConfigurationError(
                FeatureFlagErrorCodes.INVALID_RULE,
                f"percentageOfUsers must be a number in [0, 1], got {percentage_of_users!r}",
            )
    if user_roles is None:
        return PercentageRule(percentage=float(percentage_of_users))  # type: ignore[arg-type]
    roles = frozenset(user_roles)
    if percentage_of_users is None:
        return RoleRule(roles=roles)
    return RolePercentageRule(roles=roles, percentage=float(percentage_of_users))


def _describe_roles(roles: frozenset[str], user: User) -> str:
    verdict = "in" if user.role in roles else "not in"
    return f"role {user.role} {verdict} [{', '.join(sorted(roles))}]"


def _describe_percentage(percentage: float, flag_name: str, user: User) -> str:
    position = bucket(flag_name, user.id)
    verdict = "<" if position < percentage else ">="
    return f"bucket {position:.4f} {verdict} {percentage:g}"


def as_utc(value: datetime) -> datetime:
    """Attach UTC to a naive datetime; aware values are returned unchanged."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
