"""Provider adapters.

Adapters are looked up by tag through ``get_adapter(descriptor.adapter_kind)``.
Built-in kinds are registered on import.
"""

from ccs_router.core.adapters.anthropic import ANTHROPIC_ADAPTER, ANTHROPIC_ADAPTER_KIND
from ccs_router.core.adapters.base import (
    ADAPTERS,
    AdapterSpec,
    get_adapter,
    json_headers,
    register_adapter,
    supported_adapter_kinds,
)

register_adapter(ANTHROPIC_ADAPTER)

__all__ = [
    "ADAPTERS",
    "ANTHROPIC_ADAPTER",
    "ANTHROPIC_ADAPTER_KIND",
    "AdapterSpec",
    "get_adapter",
    "json_headers",
    "register_adapter",
    "supported_adapter_kinds",
]
