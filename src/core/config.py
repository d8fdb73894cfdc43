"""Filter configuration loading and validation.

This module owns YAML config parsing and range checks for filter
parameters. Other modules consume a typed ``FilterConfig`` instead of
raw mappings or CLI namespaces.
"""

from __future__ import annotations

from dataclasses import fields, replace
from pathlib import Path
from typing import Mapping, cast

import yaml

from core.errors import ConfigError
from core.types import FilterConfig

_FLOAT_KEYS = ("min_qv", "min_x", "max_x", "min_y", "max_y")
_CONFIG_KEYS = tuple(config_field.name for config_field in fields(FilterConfig))


def load_filter_config(config_path: str) -> FilterConfig:
    """Load and validate a YAML filter config file.

    Args:
        config_path: Path to a YAML mapping of filter parameters.

    Returns:
        Validated config with defaults for omitted keys.

    Raises:
        ConfigError: If the file is missing, malformed, or invalid.
    """
    payload = _load_yaml_payload(config_path)
    if payload is None:
        return FilterConfig()
    if not isinstance(payload, Mapping):
        raise ConfigError(
            f"Invalid filter config at {config_path}: expected a mapping, "
            f"got {type(payload).__name__}. Define keys such as 'min_qv' and 'max_x'."
        )
    return build_filter_config(cast(Mapping[str, object], payload))


def build_filter_config(
    values: Mapping[str, object],
    base: FilterConfig | None = None,
) -> FilterConfig:
    """Build a validated config from a mapping of overrides.

    Args:
        values: Parameter names mapped to override values.
        base: Config to override, defaults when omitted.

    Returns:
        Validated config.

    Raises:
        ConfigError: If a key is unknown or a value has the wrong type.
    """
    unknown_keys = sorted(str(key) for key in values if key not in _CONFIG_KEYS)
    if unknown_keys:
        raise ConfigError(
            f"Unknown filter config keys: {', '.join(unknown_keys)}. "
            f"Supported keys: {', '.join(_CONFIG_KEYS)}."
        )
    overrides: dict[str, object] = {}
    for key, value in values.items():
        overrides[key] = _coerce_value(key, value)
    config = replace(base or FilterConfig(), **overrides)  # type: ignore[arg-type]
    validate_filter_config(config)
    return config


def validate_filter_config(config: FilterConfig) -> None:
    """Check filter parameter ranges.

    Args:
        config: Config to validate.

    Raises:
        ConfigError: If bounds are inverted or ``min_qv`` is negative.
    """
    if config.min_qv < 0:
        raise ConfigError(
            f"Invalid min_qv {config.min_qv}: expected a non-negative Q-Score."
        )
    if config.min_x > config.max_x:
        raise ConfigError(
            f"Invalid x range: min_x {config.min_x} is greater than max_x {config.max_x}."
        )
    if config.min_y > config.max_y:
        raise ConfigError(
            f"Invalid y range: min_y {config.min_y} is greater than max_y {config.max_y}."
        )


def _load_yaml_payload(config_path: str) -> object:
    config_file = Path(config_path).expanduser()
    if not config_file.is_file():
        raise ConfigError(
            f"Filter config file does not exist at {config_file}. "
            "Provide a valid YAML file path."
        )
    try:
        return cast(object, yaml.safe_load(config_file.read_text(encoding="utf-8")))
    except OSError as error:
        raise ConfigError(
            f"Failed to read filter config at {config_file}: {error}. "
            "Check file permissions and retry."
        ) from error
    except yaml.YAMLError as error:
        raise ConfigError(
            f"Failed to parse YAML filter config at {config_file}: {error}. "
            "Fix YAML syntax and retry."
        ) from error


def _coerce_value(key: str, value: object) -> object:
    if key in _FLOAT_KEYS:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError(
                f"Invalid filter config value for '{key}': expected a number, got {value!r}."
            )
        return float(value)
    if key == "nucleus_only":
        if not isinstance(value, bool):
            raise ConfigError(
                f"Invalid filter config value for 'nucleus_only': expected true or false, "
                f"got {value!r}."
            )
        return value
    if not isinstance(value, str) or not value:
        raise ConfigError(
            f"Invalid filter config value for '{key}': expected a non-empty path, got {value!r}."
        )
    return value
