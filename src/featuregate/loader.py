"""Flag table and configuration file loading."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError

from .exceptions import ConfigurationError, FeatureFlagErrorCodes
from .models import FlagDefinition, make_rule
from .settings import FeatureGateConfig
from .validation import rule_conditions, validate_import

logger = structlog.stdlib.get_logger(__name__)


def build_flag_table(raw: Mapping[str, Any]) -> dict[str, FlagDefinition]:
    """Validate a raw flag mapping and convert it to resolver definitions.

    Raises:
        ConfigurationError: any definition is malformed. The message lists
            every problem found.
    """
    result = validate_import(raw)
    if not result.valid:
        raise ConfigurationError(
            FeatureFlagErrorCodes.INVALID_DEFINITION,
            "invalid flag definitions: " + "; ".join(result.messages()),
        )

    table: dict[str, FlagDefinition] = {}
    for name, value in raw.items():
        if isinstance(value, bool):
            table[name] = value
        else:
            table[name] = tuple(make_rule(*rule_conditions(rule)) for rule in value)
    return table


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(
            code=FeatureFlagErrorCodes.READ_FILE,
            message=f"Failed to read config file: {path}",
            cause=e,
        ) from e
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(
            code=FeatureFlagErrorCodes.PARSE_YAML,
            message=f"Failed to parse YAML: {path}",
            cause=e,
        ) from e
    if not isinstance(data, dict):
        raise ConfigurationError(
            code=FeatureFlagErrorCodes.PARSE_YAML,
            message=f"Config root must be a mapping: {path}",
        )
    return data


def load(path: Path) -> FeatureGateConfig:
    """Read and validate a YAML configuration file.

    The flag table is checked as part of loading so a malformed rule fails
    before any resolver is built.
    """
    data = _read_yaml(path)
    try:
        config = FeatureGateConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(
            code=FeatureFlagErrorCodes.VALIDATION,
            message=f"Config validation failed: {e}",
            cause=e,
        ) from e
    build_flag_table(config.flags)
    logger.info("flag_table_loaded", path=str(path), flags=len(config.flags))
    return config
