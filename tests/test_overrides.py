"""Environment override unit tests."""

import pytest
from featuregate import get_env_override, is_dev_mode, load_env_overrides, parse_override


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(None, None), ("", None), ("true", True), ("TRUE", True), (" True ", True), ("false", False), ("1", False)],
)
def test_parse_override(raw: str | None, expected: bool | None) -> None:
    """Only "true" enables; unset or empty means no override."""
    assert parse_override(raw) is expected


def test_get_env_override() -> None:
    """Per-flag override lookup."""
    env = {"FF_NEW_UI": "true", "FF_OLD_UI": "false"}
    assert get_env_override("NEW_UI", environ=env) is True
    assert get_env_override("OLD_UI", environ=env) is False
    assert get_env_override("MISSING", environ=env) is None


def test_get_env_override_reads_os_environ(monkeypatch: pytest.MonkeyPatch) -> None:
    """Without an explicit mapping os.environ is read."""
    monkeypatch.setenv("FF_FROM_OS", "true")
    assert get_env_override("FROM_OS") is True


def test_load_env_overrides_filters_known_flags() -> None:
    """Only known flags are returned when a list is given."""
    env = {"FF_A": "true", "FF_B": "", "FF_UNKNOWN": "true", "PATH": "/bin", "FF_": "true"}
    assert load_env_overrides(environ=env) == {"A": True, "UNKNOWN": True}
    assert load_env_overrides(["A", "B"], environ=env) == {"A": True}


def test_custom_prefix() -> None:
    """A custom prefix replaces FF_."""
    env = {"APP_FLAG_X": "true", "FF_X": "false"}
    assert load_env_overrides(["X"], prefix="APP_FLAG_", environ=env) == {"X": True}


def test_is_dev_mode() -> None:
    """Dev mode follows FEATUREGATE_DEV_MODE."""
    assert is_dev_mode({"FEATUREGATE_DEV_MODE": "true"}) is True
    assert is_dev_mode({}) is False
