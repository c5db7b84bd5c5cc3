"""Long-lived service context.

Owns the one resolver, health monitor (and so the one health cache), config
editor and routed client of the process. Built from Config by default;
tests construct it directly with their own collaborators.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ccs_router.core.health import (
    FileAuthStatusSource,
    HealthCache,
    HealthMonitor,
    PsutilPortInspector,
)
from ccs_router.core.provider.resolver import ProviderResolver
from ccs_router.core.router_client import RoutedClient
from ccs_router.core.routing_config import RoutingConfigEditor, RoutingConfigLoader

if TYPE_CHECKING:
    from ccs_router.core.config import Config


@dataclass
class RouterContext:
    resolver: ProviderResolver
    health_monitor: HealthMonitor
    config_editor: RoutingConfigEditor
    client: RoutedClient

    @classmethod
    def from_config(cls, config: "Config") -> "RouterContext":
        resolver = ProviderResolver(
            RoutingConfigLoader(config.config_path),
            multiplexer_base_url=config.cliproxy_base_url,
        )
        health_monitor = HealthMonitor(
            FileAuthStatusSource(config.cliproxy_auth_dir),
            PsutilPortInspector(),
            cache=HealthCache(ttl=config.health_cache_ttl),
            multiplexer_port=config.cliproxy_port,
            timeout=config.health_check_timeout,
        )
        return cls(
            resolver=resolver,
            health_monitor=health_monitor,
            config_editor=RoutingConfigEditor(config.config_path),
            client=RoutedClient(resolver, health_monitor, timeout=config.request_timeout),
        )
