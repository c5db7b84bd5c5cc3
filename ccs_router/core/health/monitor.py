"""Provider health monitoring with TTL caching.

Multiplexer providers are healthy when the CLIProxy process owns its port and
the provider has an OAuth token. Everything else is checked over HTTP with
``GET {base_url}/models``. Failures are always returned as unhealthy
records, never raised.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterable
from typing import Any

import httpx

from ccs_router.core.error_types import ProviderErrorType
from ccs_router.core.health.cache import HealthCache, HealthRecord, MultiplexerPortStatus
from ccs_router.core.health.collaborators import AuthStatusSource, PortInspector
from ccs_router.core.provider.descriptor import ProviderDescriptor, ProviderKind

DEFAULT_MULTIPLEXER_PORT = 8317
DEFAULT_CHECK_TIMEOUT_SECONDS = 5.0

logger = logging.getLogger(__name__)


class HealthMonitor:
    """Checks provider health, serving fresh verdicts from a HealthCache.

    Args:
        auth_status: Answers whether a multiplexer provider has an OAuth token.
        port_inspector: Answers whether CLIProxy is listening on its port.
        cache: Injected cache; a new one with the default TTL when omitted.
        multiplexer_port: Port the CLIProxy process is expected on.
        timeout: Seconds allowed for each HTTP check.
        transport: Optional httpx transport for the HTTP checks.
        clock: Source of ``checked_at`` timestamps (epoch seconds).
    """

    def __init__(
        self,
        auth_status: AuthStatusSource,
        port_inspector: PortInspector,
        *,
        cache: HealthCache | None = None,
        multiplexer_port: int = DEFAULT_MULTIPLEXER_PORT,
        timeout: float = DEFAULT_CHECK_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.cache = cache if cache is not None else HealthCache()
        self._auth_status = auth_status
        self._port_inspector = port_inspector
        self._multiplexer_port = multiplexer_port
        self._timeout = timeout
        self._transport = transport
        self._clock = clock
        self._port_lock = asyncio.Lock()

    async def check(self, provider: ProviderDescriptor) -> HealthRecord:
        """Return the provider's health, from cache when fresh."""
        cached = self.cache.get_fresh(provider.name, self._clock())
        if cached is not None:
            return cached

        if provider.kind is ProviderKind.MULTIPLEXER:
            record = await self._check_multiplexer_provider(provider)
        else:
            record = await self._check_http_provider(provider)

        self.cache.put(record)
        if not record.healthy:
            logger.info(f"Provider '{provider.name}' unhealthy: {record.error}")
        return record

    async def check_all(self, providers: Iterable[ProviderDescriptor]) -> list[HealthRecord]:
        """Check every provider concurrently; results follow the input order."""
        return list(await asyncio.gather(*(self.check(p) for p in providers)))

    def invalidate(self, provider_name: str | None = None) -> None:
        """Force the next check of one provider, or of everything, to re-check."""
        self.cache.invalidate(provider_name)
        logger.debug(f"Health cache invalidated ({provider_name or 'all'})")

    def cache_stats(self) -> dict[str, Any]:
        return self.cache.stats(self._clock())

    def _record(
        self, provider: ProviderDescriptor, healthy: bool, latency_ms: float, error: str | None = None
    ) -> HealthRecord:
        return HealthRecord(
            provider=provider.name,
            healthy=healthy,
            latency_ms=latency_ms,
            error=error,
            checked_at=self._clock(),
        )

    async def _check_multiplexer_provider(self, provider: ProviderDescriptor) -> HealthRecord:
        start = time.perf_counter()
        port_healthy = await self._multiplexer_port_healthy()
        latency_ms = (time.perf_counter() - start) * 1000

        if not port_healthy:
            return self._record(
                provider, False, latency_ms, ProviderErrorType.MULTIPLEXER_NOT_RUNNING.value
            )

        try:
            authenticated = self._auth_status.get_auth_status(provider.name).authenticated
        except Exception as e:
            logger.warning(f"Auth status lookup failed for '{provider.name}': {e}")
            authenticated = False

        if not authenticated:
            return self._record(
                provider, False, latency_ms, ProviderErrorType.NOT_AUTHENTICATED.value
            )
        return self._record(provider, True, latency_ms)

    async def _multiplexer_port_healthy(self) -> bool:
        # One port check serves every multiplexer provider checked within the TTL
        async with self._port_lock:
            status = self.cache.get_fresh_port_status(self._clock())
            if status is None:
                healthy = await asyncio.to_thread(self._check_port)
                status = MultiplexerPortStatus(healthy=healthy, checked_at=self._clock())
                self.cache.put_port_status(status)
            return status.healthy

    def _check_port(self) -> bool:
        try:
            info = self._port_inspector.get_process_on_port(self._multiplexer_port)
            return info is not None and self._port_inspector.is_expected_process(info)
        except Exception as e:
            logger.warning(f"Port check on {self._multiplexer_port} failed: {e}")
            return False

    async def _check_http_provider(self, provider: ProviderDescriptor) -> HealthRecord:
        endpoint = f"{provider.base_url.rstrip('/')}/models"
        headers: dict[str, str] = {}
        if provider.auth_token:
            headers["Authorization"] = f"Bearer {provider.auth_token}"
        headers.update(provider.extra_headers)

        start = time.perf_counter()
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.get(endpoint, headers=headers)
        except Exception as e:
            # Transport errors, and request-building errors such as non-ASCII header values
            latency_ms = (time.perf_counter() - start) * 1000
            if not isinstance(e, (httpx.HTTPError, httpx.InvalidURL)):
                logger.warning(f"Health check for '{provider.name}' failed unexpectedly: {e!r}")
            return self._record(provider, False, latency_ms, str(e) or e.__class__.__name__)

        latency_ms = (time.perf_counter() - start) * 1000
        if response.is_success:
            return self._record(provider, True, latency_ms)
        return self._record(
            provider,
            False,
            latency_ms,
            f"HTTP {response.status_code}: {response.reason_phrase}",
        )
