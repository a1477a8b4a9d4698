"""featuregate exception types."""

from __future__ import annotations


class FeatureFlagError(Exception):
    """Base class for featuregate errors."""

    def __init__(
        self,
        code: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class ConfigurationError(FeatureFlagError):
    """Malformed flag table, rule, or a lookup of an unknown flag."""


class FeatureFlagErrorCodes:
    """Error code constants."""

    FLAG_NOT_FOUND: str = "FLAG_NOT_FOUND"
    INVALID_RULE: str = "INVALID_RULE"
    INVALID_DEFINITION: str = "INVALID_DEFINITION"
    UNKNOWN_OVERRIDE: str = "UNKNOWN_OVERRIDE"
    READ_FILE: str = "READ_FILE_ERROR"
    PARSE_YAML: str = "PARSE_YAML_ERROR"
    PARSE_JSON: str = "PARSE_JSON_ERROR"
    VALIDATION: str = "VALIDATION_ERROR"
    HEALTH_CHECK_FAILED: str = "HEALTH_CHECK_FAILED"
