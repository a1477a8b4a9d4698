"""Environment variable overrides.

A flag ``NEW_CHECKOUT`` is overridden by ``FF_NEW_CHECKOUT=true`` (or any other
non-empty value, which reads as false).
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping

DEFAULT_ENV_PREFIX = "FF_"
DEV_MODE_VAR = "FEATUREGATE_DEV_MODE"


def parse_override(value: str | None) -> bool | None:
    """Unset or empty means no override; only ``"true"`` enables."""
    if value is None or value == "":
        return None
    return value.strip().lower() == "true"


def get_env_override(
    flag_name: str,
    *,
    prefix: str = DEFAULT_ENV_PREFIX,
    environ: Mapping[str, str] | None = None,
) -> bool | None:
    env = os.environ if environ is None else environ
    return parse_override(env.get(f"{prefix}{flag_name}"))


def load_env_overrides(
    flag_names: Iterable[str] | None = None,
    *,
    prefix: str = DEFAULT_ENV_PREFIX,
    environ: Mapping[str, str] | None = None,
) -> dict[str, bool]:
    """Collect every override present in the environment.

    When ``flag_names`` is given, variables naming other flags are ignored.
    """
    env = os.environ if environ is None else environ
    known = set(flag_names) if flag_names is not None else None
    overrides: dict[str, bool] = {}
    for key, raw in env.items():
        if not key.startswith(prefix):
            continue
        flag_name = key[len(prefix) :]
        if not flag_name or (known is not None and flag_name not in known):
            continue
        value = parse_override(raw)
        if value is not None:
            overrides[flag_name] = value
    return overrides


def is_dev_mode(environ: Mapping[str, str] | None = None) -> bool:
    env = os.environ if environ is None else environ
    return env.get(DEV_MODE_VAR) == "true"
