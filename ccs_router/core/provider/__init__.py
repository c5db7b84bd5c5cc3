"""Provider resolution package.

- ProviderDescriptor / ProviderKind: the resolved routing target
- ProviderResolver: name -> descriptor across the multiplexer, credential
  profile and remote-API sources
"""

from ccs_router.core.provider.descriptor import ProviderDescriptor, ProviderKind
from ccs_router.core.provider.resolver import (
    MULTIPLEXER_PROVIDERS,
    ProviderListing,
    ProviderResolver,
)

__all__ = [
    "MULTIPLEXER_PROVIDERS",
    "ProviderDescriptor",
    "ProviderKind",
    "ProviderListing",
    "ProviderResolver",
]
