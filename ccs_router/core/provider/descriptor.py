"""Resolved provider descriptor."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import urlsplit


class ProviderKind(str, Enum):
    """Which resolution strategy produced a descriptor."""

    MULTIPLEXER = "multiplexer"
    CREDENTIAL_PROFILE = "credential-profile"
    REMOTE_API = "remote-api"

    def __str__(self) -> str:
        return self.value


def is_absolute_http_url(url: str) -> bool:
    """Check that a URL has an http(s) scheme and a host."""
    if not isinstance(url, str):
        return False
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.netloc)


@dataclass(frozen=True)
class ProviderDescriptor:
    """Ready-to-use representation of a provider.

    Constructed fresh by the resolver on every call and never mutated. The
    auth token is kept out of ``repr`` and ``to_dict`` so a descriptor can be
    logged or returned over the API without leaking credentials.

    Attributes:
        name: Caller-supplied provider name
        kind: Resolution strategy that produced the descriptor
        adapter_kind: Tag selecting the adapter in the dispatch table
        base_url: Absolute upstream base URL
        auth_token: Bearer token, if any
        extra_headers: Headers merged last into every upstream request
    """

    name: str
    kind: ProviderKind
    adapter_kind: str
    base_url: str
    auth_token: str | None = field(default=None, repr=False)
    extra_headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Provider name is required")
        if not is_absolute_http_url(self.base_url):
            raise ValueError(
                f"Invalid base URL {self.base_url!r} for provider '{self.name}': "
                "must be an absolute http(s) URL"
            )

    @property
    def has_auth_token(self) -> bool:
        return bool(self.auth_token)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind.value,
            "adapter": self.adapter_kind,
            "base_url": self.base_url,
            "has_auth_token": self.has_auth_token,
            "headers": sorted(self.extra_headers),
        }
