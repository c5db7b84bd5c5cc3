"""Coercion and validation of environment variables against ConfigSchema.

Errors name the variable and the offending raw value so a misconfigured
deployment can be fixed without reading code.
"""

import os
from typing import Any

from ccs_router.core.config.schema import ConfigSchema, EnvVarSpec


class ConfigError(Exception):
    """Configuration validation error.

    Attributes:
        env_var: The environment variable name
        value: The raw value that failed validation
        message: Human-readable error message
    """

    def __init__(self, env_var: str, value: str, message: str) -> None:
        self.env_var = env_var
        self.value = value
        self.message = message
        super().__init__(f"{env_var}={value}: {message}")


def load_env_var(spec: EnvVarSpec) -> Any:
    """Read one variable, falling back to its default when unset.

    Set values are converted with ``spec.type_hint`` (str, int or float) and
    then checked with ``spec.validator``.

    Raises:
        ConfigError: If the value cannot be converted or fails validation
    """
    raw_value = os.environ.get(spec.name)
    if raw_value is None:
        return spec.default

    try:
        value = spec.type_hint(raw_value)
    except (ValueError, TypeError) as e:
        raise ConfigError(spec.name, raw_value, f"expected {spec.type_hint.__name__}") from e

    if spec.validator is None:
        return value
    try:
        valid = spec.validator(value)
    except (TypeError, IndexError):
        valid = False
    if not valid:
        raise ConfigError(spec.name, raw_value, f"invalid value ({spec.description})")
    return value


def validate_all() -> list[ConfigError]:
    """Check every variable in ConfigSchema and return all errors found."""
    errors: list[ConfigError] = []
    for spec in ConfigSchema.all_specs().values():
        try:
            load_env_var(spec)
        except ConfigError as e:
            errors.append(e)
    return errors
