"""Routed client for Anthropic-format requests.

Resolves the provider, optionally checks its health, and lets the adapter for
``descriptor.adapter_kind`` build the outbound request, headers and URL and
parse what comes back.
"""

import logging
import time
from collections.abc import AsyncGenerator
from typing import Any

import httpx

from ccs_router.core.adapters import AdapterSpec, get_adapter
from ccs_router.core.exceptions import (
    MissingModelError,
    ProviderUnavailableError,
    UpstreamError,
)
from ccs_router.core.health.monitor import HealthMonitor
from ccs_router.core.provider.descriptor import ProviderDescriptor
from ccs_router.core.provider.resolver import ProviderResolver

logger = logging.getLogger(__name__)


class RoutedClient:
    """Client that forwards unified requests to a named provider."""

    def __init__(
        self,
        resolver: ProviderResolver,
        health_monitor: HealthMonitor,
        *,
        timeout: float = 90,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.resolver = resolver
        self.health_monitor = health_monitor
        self.timeout = timeout
        self._transport = transport

    async def _prepare(
        self,
        provider_name: str,
        request: dict[str, Any],
        target_model: str | None,
        check_health: bool,
    ) -> tuple[ProviderDescriptor, AdapterSpec, dict[str, Any]]:
        descriptor = self.resolver.require(provider_name)

        if check_health:
            record = await self.health_monitor.check(descriptor)
            if not record.healthy:
                raise ProviderUnavailableError(descriptor.name, record.error)

        adapter = get_adapter(descriptor.adapter_kind)
        model = target_model or request.get("model")
        if not model:
            raise MissingModelError()
        return descriptor, adapter, adapter.build_request(request, model, descriptor)

    async def send_message(
        self,
        provider_name: str,
        request: dict[str, Any],
        target_model: str | None = None,
        *,
        check_health: bool = True,
    ) -> dict[str, Any]:
        """Send a non-streaming request and return the unified response."""
        descriptor, adapter, native_request = await self._prepare(
            provider_name, request, target_model, check_health
        )
        start_time = time.time()
        logger.debug(
            f"📤 REQUEST | Provider: {descriptor.name} | Model: {native_request.get('model')}"
        )

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    adapter.endpoint(descriptor),
                    json=native_request,
                    headers=adapter.headers(descriptor),
                )
                response.raise_for_status()
                response_data = response.json()
        except httpx.HTTPStatusError as e:
            raise UpstreamError(e.response.status_code, _error_detail(e.response)) from e
        except httpx.HTTPError as e:
            raise UpstreamError(502, f"{descriptor.name} request failed: {e}") from e
        except ValueError as e:
            raise UpstreamError(502, f"{descriptor.name} returned a non-JSON body: {e}") from e

        duration_ms = (time.time() - start_time) * 1000
        logger.debug(f"📥 RESPONSE | Provider: {descriptor.name} | Duration: {duration_ms:.0f}ms")
        return adapter.parse_response(response_data)

    async def stream_message(
        self,
        provider_name: str,
        request: dict[str, Any],
        target_model: str | None = None,
        *,
        check_health: bool = True,
    ) -> AsyncGenerator[Any, None]:
        """Send a streaming request and yield unified chunks, one per SSE line."""
        descriptor, adapter, native_request = await self._prepare(
            provider_name, {**request, "stream": True}, target_model, check_health
        )
        logger.debug(
            f"📤 STREAM | Provider: {descriptor.name} | Model: {native_request.get('model')}"
        )

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                async with client.stream(
                    "POST",
                    adapter.endpoint(descriptor),
                    json=native_request,
                    headers=adapter.headers(descriptor),
                ) as response:
                    if response.is_error:
                        await response.aread()
                        raise UpstreamError(response.status_code, _error_detail(response))
                    async for line in response.aiter_lines():
                        if line.strip():
                            yield adapter.parse_stream_chunk(line)
        except httpx.HTTPError as e:
            raise UpstreamError(502, f"{descriptor.name} stream failed: {e}") from e


def _error_detail(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text or response.reason_phrase
