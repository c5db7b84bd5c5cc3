"""Configuration package.

Usage:
    from ccs_router.core.config import config
    config.config_path
"""

from ccs_router.core.config.config import Config, config
from ccs_router.core.config.validation import ConfigError

__all__ = ["Config", "ConfigError", "config"]
