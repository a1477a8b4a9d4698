"""Flag resolution against a static flag table."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from .exceptions import ConfigurationError, FeatureFlagErrorCodes
from .models import EvaluationResult, FlagDefinition, User


def evaluate(flag_name: str, definition: FlagDefinition, user: User) -> bool:
    """Evaluate a single flag definition for ``user``.

    A literal bool is returned as is. A rule tuple is enabled when any rule
    matches; an empty tuple never matches. ``flag_name`` seeds the rollout
    bucket of percentage rules.
    """
    if isinstance(definition, bool):
        return definition
    return any(rule.matches(flag_name, user) for rule in definition)


class FlagResolver:
    """Read-only resolver over a validated flag table.

    Overrides short-circuit rule evaluation for the flags they name. The
    resolver holds no mutable state, so a single instance may be shared by
    any number of threads.
    """

    def __init__(
        self,
        flags: Mapping[str, FlagDefinition],
        overrides: Mapping[str, bool] | None = None,
    ) -> None:
        self._flags: Mapping[str, FlagDefinition] = MappingProxyType(dict(flags))
        overrides = dict(overrides or {})
        unknown = sorted(set(overrides) - set(self._flags))
        if unknown:
            raise ConfigurationError(
                FeatureFlagErrorCodes.UNKNOWN_OVERRIDE,
                f"overrides reference unknown flags: {', '.join(unknown)}",
            )
        self._overrides: Mapping[str, bool] = MappingProxyType(overrides)

    @property
    def flag_names(self) -> tuple[str, ...]:
        return tuple(self._flags)

    @property
    def overrides(self) -> Mapping[str, bool]:
        return self._overrides

    def __contains__(self, flag_name: object) -> bool:
        return flag_name in self._flags

    def __len__(self) -> int:
        return len(self._flags)

    def definition(self, flag_name: str) -> FlagDefinition:
        """Return the definition of ``flag_name``.

        Raises:
            ConfigurationError: the flag is not in the table.
        """
        try:
            return self._flags[flag_name]
        except KeyError:
            raise ConfigurationError(
                FeatureFlagErrorCodes.FLAG_NOT_FOUND,
                f"unknown feature flag: {flag_name}",
            ) from None

    def resolve(self, flag_name: str, user: User) -> bool:
        """Return whether ``flag_name`` is enabled for ``user``."""
        definition = self.definition(flag_name)
        override = self._overrides.get(flag_name)
        if override is not None:
            return override
        return evaluate(flag_name, definition, user)

    def explain(self, flag_name: str, user: User) -> EvaluationResult:
        """Resolve ``flag_name`` and describe which condition decided it."""
        definition = self.definition(flag_name)
        override = self._overrides.get(flag_name)
        if override is not None:
            return EvaluationResult(flag_name, override, f"override: {override}")
        if isinstance(definition, bool):
            return EvaluationResult(flag_name, definition, f"static: {definition}")
        if not definition:
            return EvaluationResult(flag_name, False, "no rules")

        lines = []
        enabled = False
        for index, rule in enumerate(definition, start=1):
            matched = rule.matches(flag_name, user)
            mark = "matched" if matched else "not matched"
            lines.append(f"rule {index} {mark}: {rule.describe(flag_name, user)}")
            enabled = enabled or matched
        return EvaluationResult(flag_name, enabled, "\n".join(lines))

    def summary(self, user: User) -> dict[str, bool]:
        """Resolved state of every known flag for ``user``."""
        return {name: self.resolve(name, user) for name in self._flags}

    def enabled_flags(self, user: User) -> list[str]:
        return [name for name in self._flags if self.resolve(name, user)]

    def disabled_flags(self, user: User) -> list[str]:
        return [name for name in self._flags if not self.resolve(name, user)]

    def all_enabled(self, user: User, flag_names: Iterable[str]) -> bool:
        return all(self.resolve(name, user) for name in flag_names)

    def any_enabled(self, user: User, flag_names: Iterable[str]) -> bool:
        return any(self.resolve(name, user) for name in flag_names)
