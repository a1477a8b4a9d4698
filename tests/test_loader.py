"""Configuration loader unit tests."""

from pathlib import Path

import pytest
from featuregate import (
    ConfigurationError,
    FeatureFlagErrorCodes,
    PercentageRule,
    RolePercentageRule,
    RoleRule,
    build_flag_table,
    load,
)

CONFIG_YAML = """\
flags:
  ADVANCED_ANALYTICS: true
  DISABLED_FEATURE: false
  MULTIPLE_ALLOWANCES:
    - percentageOfUsers: 0.25
      userRoles: [user]
    - user_roles: [admin, tester]
monitoring:
  enabled: true
  max_metrics: 50
audit:
  max_entries: 200
"""


def test_build_flag_table_converts_rules() -> None:
    """Raw rules become typed rule variants."""
    table = build_flag_table(
        {
            "S": True,
            "R": [{"userRoles": ["admin"]}, {"percentageOfUsers": 0.5}, {"userRoles": ["user"], "percentageOfUsers": 0.1}],
        }
    )
    assert table["S"] is True
    assert table["R"] == (
        RoleRule(frozenset({"admin"})),
        PercentageRule(0.5),
        RolePercentageRule(frozenset({"user"}), 0.1),
    )


def test_build_flag_table_rejects_rule_without_condition() -> None:
    """A rule with no condition is rejected."""
    with pytest.raises(ConfigurationError) as exc_info:
        build_flag_table({"BAD": [{}]})
    assert exc_info.value.code == FeatureFlagErrorCodes.INVALID_DEFINITION
    assert "BAD[0]" in str(exc_info.value)


def test_build_flag_table_reports_every_problem() -> None:
    """All problems are listed in one error."""
    with pytest.raises(ConfigurationError) as exc_info:
        build_flag_table({"X": "yes", "Y": [{"percentageOfUsers": 2}]})
    message = str(exc_info.value)
    assert "X" in message
    assert "Y[0].percentageOfUsers" in message


def test_load_config(tmp_path: Path) -> None:
    """Loading a YAML file with every section."""
    config_file = tmp_path / "flags.yaml"
    config_file.write_text(CONFIG_YAML)
    config = load(config_file)
    assert config.monitoring.enabled is True
    assert config.monitoring.max_metrics == 50
    assert config.audit.max_entries == 200
    assert config.audit.enabled is True
    assert config.log.format == "json"
    assert build_flag_table(config.flags)["DISABLED_FEATURE"] is False


def test_load_file_not_found(tmp_path: Path) -> None:
    """A missing file raises READ_FILE_ERROR."""
    with pytest.raises(ConfigurationError) as exc_info:
        load(tmp_path / "missing.yaml")
    assert exc_info.value.code == FeatureFlagErrorCodes.READ_FILE


def test_load_invalid_yaml(tmp_path: Path) -> None:
    """Broken YAML raises PARSE_YAML_ERROR."""
    bad_file = tmp_path / "bad.yaml"
    bad_file.write_text("flags: {invalid: yaml: content:\n")
    with pytest.raises(ConfigurationError) as exc_info:
        load(bad_file)
    assert exc_info.value.code == FeatureFlagErrorCodes.PARSE_YAML


def test_load_validation_error(tmp_path: Path) -> None:
    """Out-of-range settings raise VALIDATION_ERROR."""
    bad_config = tmp_path / "bad_config.yaml"
    bad_config.write_text("monitoring:\n  max_metrics: 0\n")
    with pytest.raises(ConfigurationError) as exc_info:
        load(bad_config)
    assert exc_info.value.code == FeatureFlagErrorCodes.VALIDATION


def test_load_rejects_malformed_rule(tmp_path: Path) -> None:
    """Malformed rules fail at load time."""
    bad_rules = tmp_path / "bad_rules.yaml"
    bad_rules.write_text("flags:\n  F:\n    - {}\n")
    with pytest.raises(ConfigurationError) as exc_info:
        load(bad_rules)
    assert exc_info.value.code == FeatureFlagErrorCodes.INVALID_DEFINITION


def test_error_str_contains_code() -> None:
    """The error string is prefixed with its code."""
    err = ConfigurationError(FeatureFlagErrorCodes.FLAG_NOT_FOUND, "unknown feature flag: X")
    assert str(err) == "FLAG_NOT_FOUND: unknown feature flag: X"
