"""Anthropic pass-through adapter.

Used for CLIProxy providers and Anthropic-compatible endpoints, which already
speak the unified format. The only transformation is the model name.
"""

from typing import Any

from ccs_router.core.adapters.base import AdapterSpec, json_headers
from ccs_router.core.provider.descriptor import ProviderDescriptor

ANTHROPIC_ADAPTER_KIND = "anthropic"


def build_request(
    request: dict[str, Any], target_model: str, descriptor: ProviderDescriptor
) -> dict[str, Any]:
    return {**request, "model": target_model}


def parse_response(response: Any) -> dict[str, Any]:
    # Already in Anthropic format
    return response


def parse_stream_chunk(chunk: Any) -> Any:
    # Already in Anthropic SSE format
    return chunk


def endpoint(descriptor: ProviderDescriptor) -> str:
    """Completion URL: ``{base}/v1/messages``, without doubling a trailing ``/v1``."""
    base_url = descriptor.base_url.rstrip("/")
    if base_url.endswith("/v1"):
        return f"{base_url}/messages"
    return f"{base_url}/v1/messages"


ANTHROPIC_ADAPTER = AdapterSpec(
    kind=ANTHROPIC_ADAPTER_KIND,
    build_request=build_request,
    parse_response=parse_response,
    parse_stream_chunk=parse_stream_chunk,
    headers=json_headers,
    endpoint=endpoint,
)
