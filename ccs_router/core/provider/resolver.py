"""Provider resolution.

Priority (first match wins, no fallthrough once a source claims the name):
1. Built-in CLIProxy multiplexer providers
2. Credential profiles (settings file referenced from ``profiles``)
3. Remote-API providers from ``router.providers``
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from ccs_router.core.exceptions import ProviderNotFoundError, RoutingConfigError
from ccs_router.core.provider.descriptor import ProviderDescriptor, ProviderKind
from ccs_router.core.routing_config.loader import (
    DEFAULT_ADAPTER,
    ApiProviderConfig,
    RoutingConfig,
    RoutingConfigLoader,
)

# Providers served by the local CLIProxy process
MULTIPLEXER_PROVIDERS = ("agy", "gemini", "codex", "qwen", "iflow", "kiro", "ghcp")

DEFAULT_MULTIPLEXER_BASE_URL = "http://127.0.0.1:8317"
DEFAULT_PROFILE_BASE_URL = "https://api.anthropic.com/v1"

logger = logging.getLogger(__name__)


@dataclass
class ProviderListing:
    """Provider names grouped by resolution source."""

    multiplexer: list[str] = field(default_factory=list)
    credential_profile: list[str] = field(default_factory=list)
    remote_api: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, list[str]]:
        return {
            ProviderKind.MULTIPLEXER.value: self.multiplexer,
            ProviderKind.CREDENTIAL_PROFILE.value: self.credential_profile,
            ProviderKind.REMOTE_API.value: self.remote_api,
        }


class ProviderResolver:
    """Turns provider names into ProviderDescriptors.

    Responsibilities:
    - Recognize built-in multiplexer providers
    - Read credential-profile settings files
    - Read remote-API definitions and their tokens from the environment
    - Enumerate every provider across the three sources

    The routing document is re-read on every call. ``resolve`` never raises:
    unknown names, unreadable settings files and an unparsable routing
    document all come back as ``None``.
    """

    def __init__(
        self,
        config_loader: RoutingConfigLoader,
        *,
        multiplexer_base_url: str = DEFAULT_MULTIPLEXER_BASE_URL,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            config_loader: Reader for the routing document.
            multiplexer_base_url: Base URL of the local CLIProxy process.
            environ: Environment to read remote-API tokens from. Defaults to
                ``os.environ`` at call time.
        """
        self._loader = config_loader
        self._multiplexer_base_url = multiplexer_base_url.rstrip("/")
        self._environ = environ

    def resolve(self, name: str) -> ProviderDescriptor | None:
        """Resolve a provider name, or return None if it is unknown or unusable."""
        if self.is_multiplexer_provider(name):
            return self._resolve_multiplexer(name)

        routing = self._load_routing()
        if routing is None:
            return None

        if name in routing.credential_profiles:
            if name in routing.api_providers:
                logger.warning(
                    f"Provider '{name}' is defined as both a credential profile and an "
                    "API provider; using the credential profile"
                )
            return self._resolve_credential_profile(name, routing.credential_profiles[name])

        api_config = routing.api_providers.get(name)
        if api_config is not None:
            return self._resolve_api_provider(name, api_config)

        logger.debug(f"Unknown provider '{name}'")
        return None

    def require(self, name: str) -> ProviderDescriptor:
        """Resolve a provider name or raise ProviderNotFoundError."""
        descriptor = self.resolve(name)
        if descriptor is None:
            raise ProviderNotFoundError(name)
        return descriptor

    @staticmethod
    def is_multiplexer_provider(name: str) -> bool:
        return name in MULTIPLEXER_PROVIDERS

    def is_credential_profile(self, name: str) -> bool:
        routing = self._load_routing()
        return routing is not None and name in routing.credential_profiles

    def list_providers(self) -> ProviderListing:
        """List provider names per source without reading settings files."""
        listing = ProviderListing(multiplexer=list(MULTIPLEXER_PROVIDERS))
        routing = self._load_routing()
        if routing is not None:
            listing.credential_profile = list(routing.credential_profiles)
            listing.remote_api = list(routing.api_providers)
        return listing

    def get_all_providers(self) -> list[ProviderDescriptor]:
        """Resolve every known provider.

        Credential profiles whose settings file is missing or unusable are
        omitted from the result.
        """
        providers = [self._resolve_multiplexer(name) for name in MULTIPLEXER_PROVIDERS]

        routing = self._load_routing()
        if routing is None:
            return providers

        for name, settings_path in routing.credential_profiles.items():
            descriptor = self._resolve_credential_profile(name, settings_path)
            if descriptor is not None:
                providers.append(descriptor)

        for name, api_config in routing.api_providers.items():
            if name in routing.credential_profiles:
                continue
            descriptor = self._resolve_api_provider(name, api_config)
            if descriptor is not None:
                providers.append(descriptor)

        return providers

    def _load_routing(self) -> RoutingConfig | None:
        try:
            return self._loader.load()
        except RoutingConfigError as e:
            logger.warning(f"Cannot load routing config: {e}")
            return None

    def _resolve_multiplexer(self, name: str) -> ProviderDescriptor:
        return ProviderDescriptor(
            name=name,
            kind=ProviderKind.MULTIPLEXER,
            adapter_kind=DEFAULT_ADAPTER,  # CLIProxy speaks Anthropic format
            base_url=f"{self._multiplexer_base_url}/api/provider/{name}/v1",
        )

    def _resolve_credential_profile(self, name: str, settings_path: str) -> ProviderDescriptor | None:
        path = Path(settings_path).expanduser()
        try:
            with open(path, encoding="utf-8") as f:
                settings = json.load(f)
        except FileNotFoundError:
            logger.debug(f"Settings file for profile '{name}' not found: {path}")
            return None
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Cannot read settings file for profile '{name}' ({path}): {e}")
            return None

        env = settings.get("env") if isinstance(settings, dict) else None
        if not isinstance(env, dict):
            env = {}

        base_url = env.get("ANTHROPIC_BASE_URL") or DEFAULT_PROFILE_BASE_URL
        auth_token = env.get("ANTHROPIC_AUTH_TOKEN") or None
        if not isinstance(base_url, str) or not isinstance(auth_token, (str, type(None))):
            logger.warning(f"Profile '{name}' is unusable: env values must be strings ({path})")
            return None

        try:
            return ProviderDescriptor(
                name=name,
                kind=ProviderKind.CREDENTIAL_PROFILE,
                adapter_kind=DEFAULT_ADAPTER,
                base_url=base_url,
                auth_token=auth_token,
            )
        except ValueError as e:
            logger.warning(f"Profile '{name}' is unusable: {e}")
            return None

    def _resolve_api_provider(self, name: str, api_config: ApiProviderConfig) -> ProviderDescriptor | None:
        environ = self._environ if self._environ is not None else os.environ
        auth_token = environ.get(api_config.auth_env) if api_config.auth_env else None
        if not auth_token:
            # Requests will go out unauthenticated and fail at the upstream
            logger.debug(f"No token for API provider '{name}' (env {api_config.auth_env})")

        try:
            return ProviderDescriptor(
                name=name,
                kind=ProviderKind.REMOTE_API,
                adapter_kind=api_config.adapter,
                base_url=api_config.base_url,
                auth_token=auth_token or None,
                extra_headers=dict(api_config.headers),
            )
        except ValueError as e:
            logger.warning(f"API provider '{name}' is unusable: {e}")
            return None
