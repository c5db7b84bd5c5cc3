"""Declarative schema for environment variable configuration.

This module provides a single source of truth for all environment variables,
including type conversion, validation, and documentation generation.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class EnvVarSpec:
    """Specification for a single environment variable.

    Attributes:
        name: Environment variable name (e.g., "PORT", "LOG_LEVEL")
        default: Default value if env var not set
        type_hint: Type for validation (int, str, float)
        description: Human-readable description for docs
        validator: Optional custom validation function
    """

    name: str
    default: Any
    type_hint: type
    description: str
    validator: Callable[[Any], bool] | None = None


class ConfigSchema:
    """Registry of all configuration environment variables."""

    # === Server Settings ===

    HOST = EnvVarSpec(
        name="HOST",
        default="127.0.0.1",
        type_hint=str,
        description="Host address the router API binds to",
    )

    PORT = EnvVarSpec(
        name="PORT",
        default=3000,
        type_hint=int,
        description="Router API port number",
        validator=lambda x: 1 <= x <= 65535,
    )

    LOG_LEVEL = EnvVarSpec(
        name="LOG_LEVEL",
        default="INFO",
        type_hint=str,
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        validator=lambda x: x.split()[0].upper()
        in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    )

    # === Paths ===

    CCS_HOME = EnvVarSpec(
        name="CCS_HOME",
        default="~/.ccs",
        type_hint=str,
        description="Home directory holding config.yaml, profile settings and CLIProxy auth",
    )

    CCS_CONFIG_PATH = EnvVarSpec(
        name="CCS_CONFIG_PATH",
        default=None,
        type_hint=str,
        description="Routing document path (defaults to $CCS_HOME/config.yaml)",
    )

    # === Multiplexer (CLIProxy) ===

    CCS_CLIPROXY_HOST = EnvVarSpec(
        name="CCS_CLIPROXY_HOST",
        default="127.0.0.1",
        type_hint=str,
        description="Host the local CLIProxy multiplexer listens on",
    )

    CCS_CLIPROXY_PORT = EnvVarSpec(
        name="CCS_CLIPROXY_PORT",
        default=8317,
        type_hint=int,
        description="Port the local CLIProxy multiplexer listens on",
        validator=lambda x: 1 <= x <= 65535,
    )

    # === Health checks ===

    CCS_HEALTH_CACHE_TTL = EnvVarSpec(
        name="CCS_HEALTH_CACHE_TTL",
        default=30.0,
        type_hint=float,
        description="Seconds a provider health verdict stays cached",
        validator=lambda x: x > 0,
    )

    CCS_HEALTH_CHECK_TIMEOUT = EnvVarSpec(
        name="CCS_HEALTH_CHECK_TIMEOUT",
        default=5.0,
        type_hint=float,
        description="Timeout in seconds for GET {base_url}/models health checks",
        validator=lambda x: x > 0,
    )

    # === Request path ===

    CCS_REQUEST_TIMEOUT = EnvVarSpec(
        name="CCS_REQUEST_TIMEOUT",
        default=90.0,
        type_hint=float,
        description="Timeout in seconds for routed completion requests",
        validator=lambda x: x > 0,
    )

    @classmethod
    def all_specs(cls) -> dict[str, EnvVarSpec]:
        """Get all environment variable specifications.

        Returns:
            Dictionary mapping spec names to EnvVarSpec objects
        """
        return {
            name: getattr(cls, name)
            for name in dir(cls)
            if isinstance(getattr(cls, name), EnvVarSpec)
        }

    @classmethod
    def get_spec(cls, name: str) -> EnvVarSpec | None:
        """Get specification for a specific env var by name."""
        for spec in cls.all_specs().values():
            if spec.name == name:
                return spec
        return None
