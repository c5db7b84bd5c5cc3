"""TTL caches for provider health verdicts.

Owned by whoever constructs the HealthMonitor (normally the RouterContext)
rather than living in module globals, so tests get a fresh cache and a
controllable clock.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

DEFAULT_HEALTH_TTL_SECONDS = 30.0


@dataclass(frozen=True)
class HealthRecord:
    """Cached health verdict for one provider.

    Attributes:
        provider: Provider name
        healthy: Whether the provider is reachable and authenticated
        latency_ms: Probe wall time in milliseconds
        error: Failure description when unhealthy
        checked_at: Clock reading (epoch seconds) when the check finished
    """

    provider: str
    healthy: bool
    latency_ms: float
    checked_at: float
    error: str | None = None

    def age(self, now: float) -> float:
        return now - self.checked_at

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider": self.provider,
            "healthy": self.healthy,
            "latency_ms": round(self.latency_ms, 1),
            "error": self.error,
            "checked_at": self.checked_at,
        }


@dataclass(frozen=True)
class MultiplexerPortStatus:
    """Whether the CLIProxy process owns its port; shared by all multiplexer providers."""

    healthy: bool
    checked_at: float


class HealthCache:
    """Per-provider HealthRecords plus the shared multiplexer port status.

    An entry is fresh while ``now - checked_at < ttl``; stale entries are
    never returned.
    """

    def __init__(self, ttl: float = DEFAULT_HEALTH_TTL_SECONDS) -> None:
        self.ttl = ttl
        self._records: dict[str, HealthRecord] = {}
        self._port_status: MultiplexerPortStatus | None = None

    def _is_fresh(self, checked_at: float, now: float) -> bool:
        return now - checked_at < self.ttl

    def get_fresh(self, provider: str, now: float) -> HealthRecord | None:
        record = self._records.get(provider)
        if record is not None and self._is_fresh(record.checked_at, now):
            return record
        return None

    def put(self, record: HealthRecord) -> None:
        self._records[record.provider] = record

    def get_fresh_port_status(self, now: float) -> MultiplexerPortStatus | None:
        status = self._port_status
        if status is not None and self._is_fresh(status.checked_at, now):
            return status
        return None

    def put_port_status(self, status: MultiplexerPortStatus) -> None:
        self._port_status = status

    def invalidate(self, provider: str | None = None) -> None:
        """Drop one provider's record, or everything including the port status."""
        if provider:
            self._records.pop(provider, None)
        else:
            self._records.clear()
            self._port_status = None

    def __len__(self) -> int:
        return len(self._records)

    def stats(self, now: float) -> dict[str, Any]:
        return {
            "size": len(self._records),
            "ttl": self.ttl,
            "entries": [
                {
                    "provider": name,
                    "healthy": record.healthy,
                    "age": record.age(now),
                }
                for name, record in self._records.items()
            ],
        }
