"""AuditLog unit tests."""

from datetime import UTC, datetime, timedelta
import threading
from itertools import count

import pytest
from featuregate import AuditAction, AuditLog, User


def sequential_ids():
    counter = count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def audit() -> AuditLog:
    return AuditLog(id_generator=sequential_ids())


def test_log_check(audit: AuditLog, admin: User) -> None:
    """log_check records a check entry with a generated id."""
    entry = audit.log_check("A", admin, True, {"source": "test"})
    assert entry is not None
    assert entry.id == "id-1"
    assert entry.action == AuditAction.CHECK
    assert entry.new_value is True
    assert entry.old_value is None
    assert entry.metadata == {"source": "test"}
    assert audit.get_entries() == [entry]


def test_state_change_classification(audit: AuditLog, admin: User) -> None:
    """A changed value is a toggle, an unchanged one a check."""
    toggled = audit.log_state_change("A", admin, False, True)
    unchanged = audit.log_state_change("A", admin, True, True)
    assert toggled is not None and toggled.action == AuditAction.TOGGLE
    assert toggled.old_value is False
    assert unchanged is not None and unchanged.action == AuditAction.CHECK
    assert unchanged.old_value is True


def test_enable_disable(audit: AuditLog, admin: User) -> None:
    """Explicit enable and disable entries."""
    enabled = audit.log_enable("A", admin)
    disabled = audit.log_disable("A", admin)
    assert enabled is not None and (enabled.action, enabled.new_value) == (AuditAction.ENABLE, True)
    assert disabled is not None and (disabled.action, disabled.new_value) == (AuditAction.DISABLE, False)


def test_disabled_log_records_nothing(admin: User) -> None:
    """A disabled log builds no entries."""
    audit = AuditLog(enabled=False)
    assert audit.log_check("A", admin, True) is None
    assert audit.log_state_change("A", admin, False, True) is None
    assert audit.log_enable("A", admin) is None
    assert audit.log_disable("A", admin) is None
    assert len(audit) == 0


def test_disable_keeps_existing_entries(audit: AuditLog, admin: User) -> None:
    """Disabling keeps what was already recorded."""
    audit.log_check("A", admin, True)
    audit.set_enabled(False)
    audit.log_check("A", admin, True)
    assert len(audit) == 1


def test_fifo_eviction(admin: User) -> None:
    """The oldest samples are evicted at capacity."""
    audit = AuditLog(max_entries=3, id_generator=sequential_ids())
    for flag in "ABCDE":
        audit.log_check(flag, admin, True)
    assert [e.flag for e in audit.get_entries()] == ["C", "D", "E"]


def test_invalid_capacity() -> None:
    """A capacity below one is rejected."""
    with pytest.raises(ValueError):
        AuditLog(max_entries=0)


def test_queries(audit: AuditLog, admin: User) -> None:
    """Queries by flag, user and action, and combined search."""
    other = User(id="u2", role="user")
    audit.log_check("A", admin, True)
    audit.log_check("B", other, False)
    audit.log_state_change("A", other, False, True)
    assert [e.id for e in audit.get_entries_by_flag("A")] == ["id-1", "id-3"]
    assert [e.id for e in audit.get_entries_by_user("u2")] == ["id-2", "id-3"]
    assert [e.id for e in audit.get_entries_by_action("toggle")] == ["id-3"]
    assert [e.id for e in audit.search(flag="A", user_id="u2")] == ["id-3"]
    assert audit.search(flag="A", action=AuditAction.DISABLE) == []


def test_time_range(audit: AuditLog, admin: User) -> None:
    """Time range bounds are inclusive."""
    entry = audit.log_check("A", admin, True)
    assert entry is not None
    assert audit.get_entries_by_time_range(entry.timestamp, entry.timestamp) == [entry]
    later = entry.timestamp + timedelta(seconds=1)
    assert audit.get_entries_by_time_range(later, later + timedelta(seconds=1)) == []


def test_recent(audit: AuditLog, admin: User) -> None:
    """recent returns the newest entries, oldest first."""
    for flag in "ABCD":
        audit.log_check(flag, admin, True)
    assert [e.flag for e in audit.recent(2)] == ["C", "D"]
    assert len(audit.recent(10)) == 4
    assert audit.recent(0) == []


def test_stats(audit: AuditLog, admin: User) -> None:
    """Aggregated stats over retained entries."""
    empty = audit.get_stats()
    assert empty.total_entries == 0
    assert empty.start is None and empty.end is None

    audit.log_check("A", admin, True)
    audit.log_check("A", User(id="u2", role="user"), False)
    audit.log_enable("B", admin)
    stats = audit.get_stats()
    assert stats.total_entries == 3
    assert stats.entries_by_action == {"check": 2, "enable": 1}
    assert stats.entries_by_flag == {"A": 2, "B": 1}
    assert stats.unique_users == 2
    assert stats.start is not None and stats.end is not None
    assert stats.start <= stats.end <= datetime.now(UTC)


def test_clear(audit: AuditLog, admin: User) -> None:
    """clear removes every entry."""
    audit.log_check("A", admin, True)
    audit.clear()
    assert audit.get_entries() == []


def test_default_ids_are_unique(admin: User) -> None:
    """The default generator gives unique ids."""
    audit = AuditLog()
    ids = {audit.log_check("A", admin, True).id for _ in range(100)}  # type: ignore[union-attr]
    assert len(ids) == 100


def test_time_range_accepts_naive_bounds(audit: AuditLog, admin: User) -> None:
    """Naive bounds are compared as UTC."""
    entry = audit.log_check("A", admin, True)
    assert audit.get_entries_by_time_range(datetime(2000, 1, 1), datetime(2100, 1, 1)) == [entry]
    assert audit.search(start=datetime(2100, 1, 1)) == []


def test_concurrent_log_checks() -> None:
    """Concurrent writers share one bounded log without losing order or id uniqueness."""
    audit = AuditLog(max_entries=500)
    threads_count, per_thread = 8, 200
    barrier = threading.Barrier(threads_count)

    def worker(thread_id: int) -> None:
        user = User(id=f"u{thread_id}", role="user")
        barrier.wait()
        for seq in range(per_thread):
            audit.log_check("A", user, True, {"seq": seq})

    threads = [threading.Thread(target=worker, args=(t,)) for t in range(threads_count)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    entries = audit.get_entries()
    assert len(entries) == 500
    assert len({e.id for e in entries}) == 500
    for thread_id in range(threads_count):
        seqs = [e.metadata["seq"] for e in entries if e.user.id == f"u{thread_id}" and e.metadata]
        assert seqs == list(range(per_thread - len(seqs), per_thread))
