"""Audit log of flag checks and state changes."""

from __future__ import annotations

import threading
from collections import Counter, deque
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from .ids import IdGenerator, TimestampIdGenerator
from .models import User, as_utc

DEFAULT_MAX_ENTRIES = 10000


class AuditAction(StrEnum):
    """Kind of audited action."""

    CHECK = "check"
    ENABLE = "enable"
    DISABLE = "disable"
    TOGGLE = "toggle"


@dataclass(frozen=True)
class AuditEntry:
    """Audit entry record."""

    id: str
    flag: str
    user: User
    action: AuditAction
    new_value: bool
    old_value: bool | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    metadata: Mapping[str, Any] | None = None


@dataclass(frozen=True)
class AuditStats:
    """Aggregates over the retained entries."""

    total_entries: int
    entries_by_action: dict[str, int]
    entries_by_flag: dict[str, int]
    unique_users: int
    start: datetime | None
    end: datetime | None


class AuditLog:
    """Bounded, FIFO-evicting audit log.

    Enabled by default. While disabled every ``log_*`` call returns ``None``
    without building an entry; entries already recorded are kept.
    """

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        enabled: bool = True,
        id_generator: IdGenerator | None = None,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self._lock = threading.Lock()
        self._entries: deque[AuditEntry] = deque(maxlen=max_entries)
        self._enabled = enabled
        self._next_id: IdGenerator = id_generator or TimestampIdGenerator()

    @property
    def max_entries(self) -> int:
        return self._entries.maxlen or 0

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool) -> None:
        with self._lock:
            self._enabled = enabled

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def log_check(
        self,
        flag: str,
        user: User,
        result: bool,
        metadata: Mapping[str, Any] | None = None,
    ) -> AuditEntry | None:
        if not self._enabled:
            return None
        return self._append(flag, user, AuditAction.CHECK, result, None, metadata)

    def log_state_change(
        self,
        flag: str,
        user: User,
        old_value: bool,
        new_value: bool,
        metadata: Mapping[str, Any] | None = None,
    ) -> AuditEntry | None:
        """Record a transition; an unchanged value is logged as a check."""
        if not self._enabled:
            return None
        action = AuditAction.CHECK if old_value == new_value else AuditAction.TOGGLE
        return self._append(flag, user, action, new_value, old_value, metadata)

    def log_enable(
        self,
        flag: str,
        user: User,
        metadata: Mapping[str, Any] | None = None,
    ) -> AuditEntry | None:
        if not self._enabled:
            return None
        return self._append(flag, user, AuditAction.ENABLE, True, None, metadata)

    def log_disable(
        self,
        flag: str,
        user: User,
        metadata: Mapping[str, Any] | None = None,
    ) -> AuditEntry | None:
        if not self._enabled:
            return None
        return self._append(flag, user, AuditAction.DISABLE, False, None, metadata)

    def get_entries(self) -> list[AuditEntry]:
        with self._lock:
            return list(self._entries)

    def get_entries_by_flag(self, flag: str) -> list[AuditEntry]:
        return self.search(flag=flag)

    def get_entries_by_user(self, user_id: str) -> list[AuditEntry]:
        return self.search(user_id=user_id)

    def get_entries_by_action(self, action: AuditAction | str) -> list[AuditEntry]:
        return self.search(action=action)

    def get_entries_by_time_range(self, start: datetime, end: datetime) -> list[AuditEntry]:
        """Entries with ``start <= timestamp <= end``."""
        return self.search(start=start, end=end)

    def recent(self, count: int = 100) -> list[AuditEntry]:
        """The last ``count`` entries, oldest first."""
        if count <= 0:
            return []
        return self.get_entries()[-count:]

    def search(
        self,
        *,
        flag: str | None = None,
        user_id: str | None = None,
        action: AuditAction | str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[AuditEntry]:
        """Entries matching every given criterion; omitted criteria match all.

        Naive ``start`` / ``end`` bounds are taken as UTC.
        """
        if action is not None:
            action = AuditAction(action)
        if start is not None:
            start = as_utc(start)
        if end is not None:
            end = as_utc(end)
        return [
            e
            for e in self.get_entries()
            if (flag is None or e.flag == flag)
            and (user_id is None or e.user.id == user_id)
            and (action is None or e.action == action)
            and (start is None or e.timestamp >= start)
            and (end is None or e.timestamp <= end)
        ]

    def get_stats(self) -> AuditStats:
        entries = self.get_entries()
        timestamps = [e.timestamp for e in entries]
        return AuditStats(
            total_entries=len(entries),
            entries_by_action=dict(Counter(str(e.action) for e in entries)),
            entries_by_flag=dict(Counter(e.flag for e in entries)),
            unique_users=len({e.user.id for e in entries}),
            start=min(timestamps) if timestamps else None,
            end=max(timestamps) if timestamps else None,
        )

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _append(
        self,
        flag: str,
        user: User,
        action: AuditAction,
        new_value: bool,
        old_value: bool | None,
        metadata: Mapping[str, Any] | None,
    ) -> AuditEntry:
        entry = AuditEntry(
            id=self._next_id(),
            flag=flag,
            user=User(id=user.id, role=user.role),
            action=action,
            new_value=new_value,
            old_value=old_value,
            metadata=dict(metadata) if metadata is not None else None,
        )
        with self._lock:
            self._entries.append(entry)
        return entry
