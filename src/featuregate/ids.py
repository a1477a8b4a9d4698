"""Unique id generation for audit entries."""

from __future__ import annotations

import threading
import time
import uuid
from typing import Protocol


class IdGenerator(Protocol):
    """Callable returning a new process-unique id."""

    def __call__(self) -> str: ...


class TimestampIdGenerator:
    """Ids of the form ``<epoch-ms>-<sequence>-<random>``.

    The millisecond part never goes backwards even if the wall clock does, and
    the sequence makes ids unique within one generator regardless of the
    random suffix.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last_ms = 0
        self._sequence = 0

    def __call__(self) -> str:
        with self._lock:
            now_ms = max(time.time_ns() // 1_000_000, self._last_ms)
            self._last_ms = now_ms
            self._sequence += 1
            sequence = self._sequence
        return f"{now_ms}-{sequence}-{uuid.uuid4().hex[:9]}"


def uuid_id() -> str:
    """UUID v4 id."""
    return str(uuid.uuid4())
