"""Comparison of resolved flag states across users and over time."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from types import MappingProxyType

from .models import User
from .resolver import FlagResolver


@dataclass(frozen=True)
class FlagComparison:
    flag: str
    state_a: bool
    state_b: bool

    @property
    def differs(self) -> bool:
        return self.state_a != self.state_b


@dataclass(frozen=True)
class UserComparison:
    """Per-flag states of two users plus the views derived from them."""

    user_a: User
    user_b: User
    flags: tuple[FlagComparison, ...]

    @property
    def differences(self) -> list[FlagComparison]:
        return [c for c in self.flags if c.differs]

    @property
    def exclusive_to_a(self) -> list[str]:
        return [c.flag for c in self.flags if c.state_a and not c.state_b]

    @property
    def exclusive_to_b(self) -> list[str]:
        return [c.flag for c in self.flags if c.state_b and not c.state_a]

    @property
    def shared(self) -> list[str]:
        return [c.flag for c in self.flags if c.state_a and c.state_b]

    @property
    def similarity(self) -> float:
        """Percentage of flags with the same state; 100.0 for an empty table."""
        if not self.flags:
            return 100.0
        same = sum(1 for c in self.flags if not c.differs)
        return same / len(self.flags) * 100


@dataclass(frozen=True)
class Snapshot:
    """Resolved state of every flag for one user at one instant."""

    user: User
    flags: Mapping[str, bool]
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        object.__setattr__(self, "flags", MappingProxyType(dict(self.flags)))


@dataclass(frozen=True)
class SnapshotDiff:
    added: tuple[str, ...]
    removed: tuple[str, ...]
    changed: tuple[str, ...]
    unchanged: tuple[str, ...]
    time_delta: timedelta


def compare_users(resolver: FlagResolver, user_a: User, user_b: User) -> UserComparison:
    return UserComparison(
        user_a=user_a,
        user_b=user_b,
        flags=tuple(
            FlagComparison(name, resolver.resolve(name, user_a), resolver.resolve(name, user_b))
            for name in resolver.flag_names
        ),
    )


def create_snapshot(resolver: FlagResolver, user: User) -> Snapshot:
    return Snapshot(user=user, flags=resolver.summary(user))


def diff_snapshots(first: Snapshot, second: Snapshot) -> SnapshotDiff:
    """Classify every flag present in either snapshot.

    Flags are reported in the order they appear in ``first``, followed by
    flags only ``second`` knows about.
    """
    added: list[str] = []
    removed: list[str] = []
    changed: list[str] = []
    unchanged: list[str] = []

    names = list(first.flags) + [name for name in second.flags if name not in first.flags]
    for name in names:
        if name not in first.flags:
            added.append(name)
        elif name not in second.flags:
            removed.append(name)
        elif first.flags[name] != second.flags[name]:
            changed.append(name)
        else:
            unchanged.append(name)

    return SnapshotDiff(
        added=tuple(added),
        removed=tuple(removed),
        changed=tuple(changed),
        unchanged=tuple(unchanged),
        time_delta=second.timestamp - first.timestamp,
    )


def compare_against_many(
    resolver: FlagResolver, target: User, users: Iterable[User]
) -> dict[str, UserComparison]:
    """Comparison of ``target`` with each user, keyed by user id."""
    return {user.id: compare_users(resolver, target, user) for user in users}


def find_similar_users(
    resolver: FlagResolver,
    target: User,
    users: Iterable[User],
    min_similarity: float = 80.0,
) -> list[tuple[User, float]]:
    """Users at or above ``min_similarity``, most similar first."""
    scored = [(user, compare_users(resolver, target, user).similarity) for user in users]
    matches = [item for item in scored if item[1] >= min_similarity]
    return sorted(matches, key=lambda item: item[1], reverse=True)


def _mark(state: bool) -> str:
    return "on" if state else "off"


def comparison_report(comparison: UserComparison) -> str:
    a, b = comparison.user_a, comparison.user_b
    differences = comparison.differences
    lines = [
        "Feature Flag Comparison Report",
        "==============================",
        "",
        f"User A: {a.id} ({a.role})",
        f"User B: {b.id} ({b.role})",
        "",
        f"Similarity: {comparison.similarity:.1f}%",
        f"Total Flags: {len(comparison.flags)}",
        f"Same: {len(comparison.flags) - len(differences)}",
        f"Different: {len(differences)}",
        "",
    ]
    if differences:
        lines += ["Differences:", "------------"]
        for diff in differences:
            lines.append(f"{diff.flag}: A={_mark(diff.state_a)} B={_mark(diff.state_b)}")
        lines.append("")

    for title, flags in (
        ("Exclusive to User A", comparison.exclusive_to_a),
        ("Exclusive to User B", comparison.exclusive_to_b),
        ("Shared Flags", comparison.shared),
    ):
        if flags:
            lines.append(f"{title} ({len(flags)}):")
            lines += [f"  - {flag}" for flag in flags]
            lines.append("")
    return "\n".join(lines)
