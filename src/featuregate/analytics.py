"""Usage analytics for flag checks.

Trackers receive one :class:`FlagEvent` per tracked check. Every tracker
exposes ``events()``; trackers that forward events elsewhere instead of
storing them return an empty list, so usage statistics can be asked of any
tracker and are simply ``None`` when nothing is known.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections import deque
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

import structlog

from .metrics import flag_checks_total
from .models import User

DEFAULT_MAX_EVENTS = 1000

logger = structlog.stdlib.get_logger(__name__)


class FlagEventType(StrEnum):
    FLAG_ENABLED = "flag_enabled"
    FLAG_DISABLED = "flag_disabled"


@dataclass(frozen=True)
class FlagEvent:
    """A single tracked flag check."""

    type: FlagEventType
    flag_name: str
    user_id: str
    user_role: str
    enabled: bool
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    metadata: Mapping[str, Any] | None = None


class AnalyticsTracker(ABC):
    """Destination for flag events."""

    @abstractmethod
    def track(self, event: FlagEvent) -> None: ...

    def events(self) -> list[FlagEvent]:
        return []

    def events_by_flag(self, flag_name: str) -> list[FlagEvent]:
        return [e for e in self.events() if e.flag_name == flag_name]

    def events_by_user(self, user_id: str) -> list[FlagEvent]:
        return [e for e in self.events() if e.user_id == user_id]


class InMemoryAnalytics(AnalyticsTracker):
    """Keeps the most recent ``max_events`` events."""

    def __init__(self, max_events: int = DEFAULT_MAX_EVENTS) -> None:
        self._lock = threading.Lock()
        self._events: deque[FlagEvent] = deque(maxlen=max_events)

    def track(self, event: FlagEvent) -> None:
        with self._lock:
            self._events.append(event)

    def events(self) -> list[FlagEvent]:
        with self._lock:
            return list(self._events)

    def clear(self) -> None:
        with self._lock:
            self._events.clear()


class LoggingAnalytics(AnalyticsTracker):
    """Writes each event to the structured log at debug level."""

    def track(self, event: FlagEvent) -> None:
        logger.debug(
            "feature_flag_checked",
            flag=event.flag_name,
            user_id=event.user_id,
            user_role=event.user_role,
            enabled=event.enabled,
            timestamp=event.timestamp.isoformat(),
        )


class CallbackAnalytics(AnalyticsTracker):
    """Forwards events to a user supplied function."""

    def __init__(self, send: Callable[[FlagEvent], None]) -> None:
        self._send = send

    def track(self, event: FlagEvent) -> None:
        self._send(event)


def track_check(
    tracker: AnalyticsTracker,
    flag_name: str,
    user: User,
    enabled: bool,
    metadata: Mapping[str, Any] | None = None,
) -> None:
    """Build and deliver an event; tracker failures are logged and dropped."""
    event = FlagEvent(
        type=FlagEventType.FLAG_ENABLED if enabled else FlagEventType.FLAG_DISABLED,
        flag_name=flag_name,
        user_id=user.id,
        user_role=user.role,
        enabled=enabled,
        metadata=metadata,
    )
    try:
        tracker.track(event)
        flag_checks_total.add(1, {"flag": flag_name, "enabled": str(enabled).lower()})
    except Exception as e:
        logger.warning("analytics_track_failed", flag=flag_name, error=str(e))


@dataclass(frozen=True)
class FlagUsageStats:
    total_checks: int
    enabled_count: int
    disabled_count: int
    unique_users: frozenset[str]
    enablement_rate: float


@dataclass(frozen=True)
class UserUsageStats:
    total_checks: int
    flags_enabled: frozenset[str]
    flags_disabled: frozenset[str]
    last_check: datetime | None


def flag_usage_stats(tracker: AnalyticsTracker, flag_name: str) -> FlagUsageStats | None:
    events = tracker.events_by_flag(flag_name)
    if not events:
        return None
    enabled_count = sum(1 for e in events if e.enabled)
    return FlagUsageStats(
        total_checks=len(events),
        enabled_count=enabled_count,
        disabled_count=len(events) - enabled_count,
        unique_users=frozenset(e.user_id for e in events),
        enablement_rate=enabled_count / len(events),
    )


def user_usage_stats(tracker: AnalyticsTracker, user_id: str) -> UserUsageStats | None:
    events = tracker.events_by_user(user_id)
    if not events:
        return None
    return UserUsageStats(
        total_checks=len(events),
        flags_enabled=frozenset(e.flag_name for e in events if e.enabled),
        flags_disabled=frozenset(e.flag_name for e in events if not e.enabled),
        last_check=events[-1].timestamp,
    )
