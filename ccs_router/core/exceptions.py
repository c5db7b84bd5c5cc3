"""
Exception hierarchy for the router.

All exceptions inherit from RouterError, allowing callers to catch every
router-specific failure with a single except clause.

Resolution and health-check problems are normally reported as values
(``None`` descriptors, unhealthy ``HealthRecord``s); these exceptions are for
the places where a caller explicitly asked for a usable provider or for a
configuration write to take effect.
"""

from __future__ import annotations

from pathlib import Path


class RouterError(Exception):
    """Base exception for all router errors."""


class ProviderNotFoundError(RouterError):
    """Raised when a provider name does not resolve to a usable descriptor."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Provider not found or unusable: {name!r}")


class ProviderUnavailableError(RouterError):
    """Raised when a resolved provider fails its health check."""

    def __init__(self, name: str, error: str | None) -> None:
        self.name = name
        self.error = error
        super().__init__(f"Provider {name!r} is unavailable: {error or 'unhealthy'}")


class UnknownAdapterError(RouterError):
    """Raised when no adapter is registered for an adapter kind."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"No adapter registered for kind {kind!r}")


class UpstreamError(RouterError):
    """Raised when forwarding a request to the upstream provider fails.

    Attributes:
        status_code: HTTP status returned by the upstream, or 502 when the
            request never produced a response
        detail: Parsed JSON error body when available, else a message
    """

    def __init__(self, status_code: int, detail: object) -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"Upstream error {status_code}: {detail}")


class RoutingConfigError(RouterError):
    """Raised when the routing document exists but cannot be parsed."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(f"Invalid routing config {path}: {message}")


class ConfigPersistenceError(RouterError):
    """Raised when the Config Editor cannot read or write the routing document."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(f"Cannot update {path}: {message}")


class MissingModelError(RouterError, ValueError):
    """Raised when neither the request nor the caller names a target model."""

    def __init__(self) -> None:
        super().__init__("A target model is required when the request has no 'model'")
