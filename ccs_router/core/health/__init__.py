"""Provider health monitoring.

- HealthMonitor: cached reachability/auth verdicts per provider
- HealthCache: injectable TTL store (per-provider records + shared port status)
- collaborators: auth-status and port-inspection protocols with defaults
"""

from ccs_router.core.health.cache import (
    DEFAULT_HEALTH_TTL_SECONDS,
    HealthCache,
    HealthRecord,
    MultiplexerPortStatus,
)
from ccs_router.core.health.collaborators import (
    AuthStatus,
    AuthStatusSource,
    FileAuthStatusSource,
    PortInspector,
    ProcessInfo,
    PsutilPortInspector,
)
from ccs_router.core.health.monitor import HealthMonitor

__all__ = [
    "DEFAULT_HEALTH_TTL_SECONDS",
    "AuthStatus",
    "AuthStatusSource",
    "FileAuthStatusSource",
    "HealthCache",
    "HealthMonitor",
    "HealthRecord",
    "MultiplexerPortStatus",
    "PortInspector",
    "ProcessInfo",
    "PsutilPortInspector",
]
