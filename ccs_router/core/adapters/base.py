"""Adapter dispatch table.

An adapter converts between the unified (Anthropic Messages) format and one
provider wire format. Each adapter kind is a single ``AdapterSpec`` record of
plain callables; callers look the record up by ``descriptor.adapter_kind`` and
never branch on the provider kind. Supporting a new wire format means
registering one more record.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ccs_router.core.exceptions import UnknownAdapterError
from ccs_router.core.provider.descriptor import ProviderDescriptor

logger = logging.getLogger(__name__)

BuildRequestFn = Callable[[dict[str, Any], str, ProviderDescriptor], dict[str, Any]]
ParseResponseFn = Callable[[Any], dict[str, Any]]
ParseStreamChunkFn = Callable[[Any], Any]
HeadersFn = Callable[[ProviderDescriptor], dict[str, str]]
EndpointFn = Callable[[ProviderDescriptor], str]


@dataclass(frozen=True)
class AdapterSpec:
    """The operations one adapter kind provides.

    Attributes:
        kind: Tag matched against ``ProviderDescriptor.adapter_kind``
        build_request: (unified_request, target_model, descriptor) -> native request
        parse_response: native response -> unified response
        parse_stream_chunk: raw stream chunk -> unified chunk
        headers: descriptor -> outbound HTTP headers
        endpoint: descriptor -> completion URL
    """

    kind: str
    build_request: BuildRequestFn
    parse_response: ParseResponseFn
    parse_stream_chunk: ParseStreamChunkFn
    headers: HeadersFn
    endpoint: EndpointFn


ADAPTERS: dict[str, AdapterSpec] = {}


def register_adapter(spec: AdapterSpec) -> None:
    """Add or replace the table entry for ``spec.kind``."""
    if spec.kind in ADAPTERS:
        logger.debug(f"Replacing adapter for kind '{spec.kind}'")
    ADAPTERS[spec.kind] = spec


def get_adapter(kind: str) -> AdapterSpec:
    """Look up the adapter for a kind.

    Raises:
        UnknownAdapterError: If nothing is registered for ``kind``.
    """
    try:
        return ADAPTERS[kind]
    except KeyError:
        raise UnknownAdapterError(kind) from None


def supported_adapter_kinds() -> list[str]:
    return sorted(ADAPTERS)


def json_headers(descriptor: ProviderDescriptor) -> dict[str, str]:
    """JSON content type, optional bearer auth, then the descriptor's extra headers.

    Extra headers are merged last and may override the first two.
    """
    headers = {"Content-Type": "application/json"}
    if descriptor.auth_token:
        headers["Authorization"] = f"Bearer {descriptor.auth_token}"
    headers.update(descriptor.extra_headers)
    return headers
