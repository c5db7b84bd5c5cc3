"""Routing document access.

- RoutingConfigLoader: reads credential profiles, remote-API providers,
  routing profiles and defaults
- RoutingConfigEditor: comment-preserving mutations of routing profiles and
  defaults
"""

from ccs_router.core.routing_config.loader import (
    ApiProviderConfig,
    RoutingConfig,
    RoutingConfigLoader,
)
from ccs_router.core.routing_config.writer import RoutingConfigEditor

__all__ = [
    "ApiProviderConfig",
    "RoutingConfig",
    "RoutingConfigEditor",
    "RoutingConfigLoader",
]
